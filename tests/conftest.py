"""Pytest configuration for svclaunch tests.

Fake platform tools (serviceInit.sh, localIp.sh, discoveryData.sh, ...)
and providers are written as small shell scripts into tmp_path. Each one
appends a line to a shared trace file so tests can check call order.
"""

import os
from pathlib import Path

import pytest

from svclaunch.base_service import LaunchContext
from svclaunch.management.environment import LauncherSettings
from tests.helpers.scripts import read_trace, trace_line, write_script


LOCAL_IP = "10.0.0.5"
DEBUG_PORT = "31100"
JMX_PORT = "31101"
JAVA_OPTS = "-Xmx1g -Dfoo=bar"
MIN_HEAP_OPT = "-Xms512m"

PROMETHEUS_CONFIG = "global:\\n  scrape_interval: 15s\\nscrape_configs: []\\n"


@pytest.fixture
def trace_file(tmp_path) -> Path:
    return tmp_path / "trace.log"


@pytest.fixture
def trace(trace_file):
    """Callable returning the trace lines written so far."""
    return lambda: read_trace(trace_file)


@pytest.fixture
def service_dirs(tmp_path) -> dict[str, Path]:
    dirs = {
        name: tmp_path / name
        for name in ("tools", "package", "logs", "data", "logging-conf")
    }
    for path in dirs.values():
        path.mkdir()
    return dirs


@pytest.fixture
def tools_dir(service_dirs, trace_file) -> Path:
    """SERVICE_TOOLS_DIR populated with working fake tools."""
    tools = service_dirs["tools"]
    write_script(tools / "serviceInit.sh", trace_line(trace_file, "init"))
    write_script(tools / "localIp.sh", f"""
{trace_line(trace_file, "local_ip")}
echo {LOCAL_IP}
""")
    write_script(tools / "discoveryData.sh", f"""
{trace_line(trace_file, "discovery $2")}
case "$2" in
  INITIAL_CONFIG) echo '{{"peers": ["a", "b"]}}' ;;
  HOST_LIST) echo "10.0.0.7,10.0.0.8" ;;
  QUORUM) echo null ;;
  compactionThroughput) echo 16 ;;
  streamThroughput) echo 200 ;;
  EMPTY) ;;
  *) exit 1 ;;
esac
""")
    write_script(tools / "internalConfig.sh", f"""
{trace_line(trace_file, "internal_config $1")}
printf '{PROMETHEUS_CONFIG}'
""")
    write_script(tools / "zookeeperUrl.sh", 'echo "zk1:2181,zk2:2181$1"')
    return tools


@pytest.fixture
def provider_script(tools_dir, service_dirs, trace_file) -> Path:
    """One script answering every provider, selected by its first argument."""
    return write_script(tools_dir / "provider.sh", f"""
{trace_line(trace_file, "provider $1")}
case "$1" in
  debug_port) echo {DEBUG_PORT} ;;
  jmx_port) echo {JMX_PORT} ;;
  java_opts) echo "{JAVA_OPTS}" ;;
  min_heap_opt) echo "{MIN_HEAP_OPT}" ;;
  logging_conf_directory) echo "{service_dirs['logging-conf']}" ;;
  download_ssl) echo bundle > "$2" ;;
  *) exit 2 ;;
esac
""")


@pytest.fixture
def provider_config(provider_script) -> dict[str, str]:
    names = ("debug_port", "jmx_port", "java_opts", "min_heap_opt", "logging_conf_directory", "download_ssl")
    return {name: f"{provider_script} {name}" for name in names}


@pytest.fixture
def base_environ(service_dirs, tools_dir) -> dict[str, str]:
    """Minimal environment every launcher needs."""
    return {
        "PATH": os.environ.get("PATH", os.defpath),
        "SERVICE_TOOLS_DIR": str(tools_dir),
        "SERVICE_PACKAGE_DIR": str(service_dirs["package"]),
        "SERVICE_LOG_DIR": str(service_dirs["logs"]),
        "SERVICE_DATA_DIR": str(service_dirs["data"]),
        "SERVICE_UUID": "svc-uuid",
        "SERVICE_INSTANCE_UUID": "inst-uuid",
        "PORT_DEF_MONITORING_PORT": "9100",
        "PORT_DEF_SUPPORT_PORT": "9101",
    }


@pytest.fixture
def launcher_config(provider_config) -> dict:
    """Resolved launcher config (as produced by ConfigurationManager.resolve_config)."""
    return {
        "tools": {},
        "providers": provider_config,
        "helpers": {
            "vertx": "/opt/aspen/scripts/start-vertx.sh",
            "tomcat": "/opt/aspen/scripts/start-tomcat.sh",
        },
        "registry": {},
        "service": {},
    }


@pytest.fixture
def make_context(base_environ, launcher_config):
    """Factory: make_context(extra_env=None, service_config=None) -> LaunchContext."""
    def _make(extra_env: dict[str, str] | None = None, service_config: dict | None = None) -> LaunchContext:
        settings = LauncherSettings.from_environ({**base_environ, **(extra_env or {})})
        config = {**launcher_config, "service": service_config or {}}
        return LaunchContext.create(settings, config)
    return _make
