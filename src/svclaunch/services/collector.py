"""Jaeger collector.

Spans are small (50-100 bytes in Elasticsearch, 512 bytes at most), so a
queue of 200,000 holds roughly 100MB. Each worker handles one span at a
time, hence the large worker count.
"""

import json
from pathlib import Path
from typing import Any

from svclaunch.base_service import LaunchConfiguration, launcher
from svclaunch.errors import LaunchFailure, MissingConfiguration
from svclaunch.management.ports import bound_port
from svclaunch.services.common import DirectServiceLauncher


QUEUE_SIZE = 200000
NUM_WORKERS = 128
SAMPLING_STRATEGIES_FILE = "conf/sampling-strategy.json"


def set_sampling_param(document: Any, rate: float) -> int:
    """Set every 'param' key in a sampling strategies document; returns the count."""
    count = 0
    if isinstance(document, dict):
        for key, value in document.items():
            if key == "param":
                document[key] = rate
                count += 1
            else:
                count += set_sampling_param(value, rate)
    elif isinstance(document, list):
        for item in document:
            count += set_sampling_param(item, rate)
    return count


@launcher("collector")
class CollectorLauncher(DirectServiceLauncher):
    """Jaeger collector writing spans to Elasticsearch."""
    binary = "./jaeger-collector"
    ports = (
        bound_port("collector-http", "COLLECTOR_HTTP_PORT"),
        bound_port("collector-tchannel", "COLLECTOR_TCHANNEL_PORT"),
        bound_port("collector-health", "COLLECTOR_HEALTH_CHECK_PORT"),
    )

    def update_sampling_rate(self, path: Path, rate_text: str):
        try:
            rate = float(rate_text)
        except ValueError as e:
            raise MissingConfiguration("SAMPLING_RATE", f"not a number: {rate_text!r}") from e

        try:
            with open(path) as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            raise LaunchFailure(f"Cannot read sampling strategies {path}: {e}") from e

        count = set_sampling_param(document, rate)
        try:
            with open(path, "w") as f:
                json.dump(document, f, indent=2)
        except OSError as e:
            raise LaunchFailure(f"Cannot write sampling strategies {path}: {e}") from e
        self.logger.info(f"Set sampling param to {rate} in {path} ({count} entries)")

    def configure(self, config: LaunchConfiguration):
        service_config = self.context.service_config
        host = self.require_env("ELASTICSEARCH_HOST")
        port = self.require_env_port("ELASTICSEARCH_PORT")
        strategies = Path(service_config.get("sampling_strategies_file", SAMPLING_STRATEGIES_FILE))

        rate = self.settings.get("SAMPLING_RATE")
        if rate is not None:
            self.update_sampling_rate(strategies, rate)

        config.values.update({
            "es_server_urls": f"http://{host}:{port}",
            "sampling_strategies_file": str(strategies),
            "queue_size": int(service_config.get("queue_size", QUEUE_SIZE)),
            "num_workers": int(service_config.get("num_workers", NUM_WORKERS)),
        })

    def build_args(self, config: LaunchConfiguration) -> list[str]:
        values = config.values
        return [
            f"--es.server-urls={values['es_server_urls']}",
            f"--collector.http-port={config.port('collector-http')}",
            f"--collector.port={config.port('collector-tchannel')}",
            f"--admin-http-port={config.port('collector-health')}",
            f"--sampling.strategies-file={values['sampling_strategies_file']}",
            f"--collector.queue-size={values['queue_size']}",
            f"--collector.num-workers={values['num_workers']}",
        ]
