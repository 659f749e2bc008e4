"""Process launchers.

ExecLauncher replaces the launcher's own process image with the target,
so the supervisor sees a single process and the target's exit code. No
launcher code runs after a successful exec.

SpawnLauncher runs the target as a child instead, forwards termination
signals to it and exits with its return code. Use it where exec is not
wanted (e.g. under a debugger or on platforms without exec semantics).
Neither launcher restarts or health-checks the target.
"""

import logging
import os
import signal
import subprocess
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import NoReturn

from svclaunch.base_service import LaunchSpec
from svclaunch.errors import LaunchFailure
from svclaunch.launchers.base_launcher import BaseLauncher


FORWARDED_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGINT", "SIGHUP") if hasattr(signal, name)
)


def _flush_output():
    for handler in logging.getLogger().handlers:
        handler.flush()
    sys.stdout.flush()
    sys.stderr.flush()


@dataclass
class ProcessInfo:
    """Information about a spawned target process."""
    process: subprocess.Popen
    start_time: datetime
    args: list[str]


class ExecLauncher(BaseLauncher):
    """Launcher that replaces the current process with the target."""

    def __init__(self, launcher_id: str = "exec-launcher", **kwargs):
        super().__init__(launcher_id, **kwargs)

    def _get_launcher_type_display(self) -> str:
        return "Exec (target replaces this process)"

    def launch_process(self, spec: LaunchSpec) -> NoReturn:
        executable = self.locate_executable(spec.executable, spec.env)
        self.logger.info(f"Executing: {spec.command_line}")
        _flush_output()
        try:
            os.execve(executable, spec.argv, spec.env)
        except OSError as e:
            raise LaunchFailure(f"Failed to exec {executable}: {e}") from e


class SpawnLauncher(BaseLauncher):
    """Launcher that runs the target as a child and waits for it."""

    def __init__(self, launcher_id: str = "spawn-launcher", **kwargs):
        super().__init__(launcher_id, **kwargs)
        self.process_info: ProcessInfo | None = None

    def _get_launcher_type_display(self) -> str:
        return "Spawn (target runs as child, signals forwarded)"

    def launch_process(self, spec: LaunchSpec) -> int:
        executable = self.locate_executable(spec.executable, spec.env)
        self.logger.info(f"Starting: {spec.command_line}")
        _flush_output()

        try:
            process = subprocess.Popen(spec.argv, executable=executable, env=spec.env)
        except OSError as e:
            raise LaunchFailure(f"Failed to start {executable}: {e}") from e

        self.process_info = ProcessInfo(
            process=process,
            start_time=datetime.now(),
            args=spec.argv
        )
        self.logger.info(f"Started {spec.argv[0]} (PID: {process.pid})")

        def forward(signum, frame):
            if process.poll() is None:
                self.logger.info(f"Forwarding signal {signal.Signals(signum).name} to PID {process.pid}")
                process.send_signal(signum)

        previous = {sig: signal.signal(sig, forward) for sig in FORWARDED_SIGNALS}
        try:
            returncode = process.wait()
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

        runtime = datetime.now() - self.process_info.start_time
        self.logger.info(f"Target exited with code {returncode} after {runtime.total_seconds():.1f}s")
        # Killed by signal N -> shell convention 128 + N
        return returncode if returncode >= 0 else 128 - returncode
