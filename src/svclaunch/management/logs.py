"""Standard output/error capture for launched services.

Each service writes to a pair of files in SERVICE_LOG_DIR:

    <log_dir>/<base>.stdout
    <log_dir>/<base>.stderr

Non-empty files from the previous run are rotated aside with a UTC
timestamp suffix before the new ones are opened in append mode. The
redirected descriptors are inherited by the exec'd target and stay open
until the process exits.
"""

import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from svclaunch.errors import LaunchFailure


ROTATE_TIMESTAMP_FORMAT = "%Y-%m-%d-%H:%M:%S"

_log = logging.getLogger("logs")


@dataclass(frozen=True)
class LogSinkPair:
    """Destination paths for a service's stdout and stderr."""
    stdout: Path
    stderr: Path

    @classmethod
    def for_service(cls, log_dir: str | Path, base: str) -> "LogSinkPair":
        log_dir = Path(log_dir)
        return cls(
            stdout=log_dir / f"{base}.stdout",
            stderr=log_dir / f"{base}.stderr",
        )


def rotate_log(path: Path, now: datetime | None = None) -> Path | None:
    """Move a non-empty log file aside.

    Returns:
        The rotated path, or None if nothing needed rotating
    """
    if not path.exists() or path.stat().st_size == 0:
        return None
    now = now or datetime.now(timezone.utc)
    rotated = path.with_name(f"{path.name}.{now.strftime(ROTATE_TIMESTAMP_FORMAT)}")
    path.rename(rotated)
    _log.debug(f"Rotated {path} -> {rotated}")
    return rotated


def _redirect_fd(path: Path, fd: int):
    new_fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o644)
    try:
        os.dup2(new_fd, fd)
    finally:
        os.close(new_fd)


def redirect_to_log(pair: LogSinkPair, fds: tuple[int, int] = (1, 2), rotate: bool = True) -> LogSinkPair:
    """Rotate the sink files and point stdout/stderr descriptors at them.

    Args:
        pair: Destination files
        fds: Descriptors to replace (stdout, stderr)
        rotate: Rotate non-empty previous logs first

    Raises:
        LaunchFailure: If the log directory or files cannot be created
    """
    try:
        pair.stdout.parent.mkdir(parents=True, exist_ok=True)
        pair.stderr.parent.mkdir(parents=True, exist_ok=True)
        if rotate:
            rotate_log(pair.stdout)
            rotate_log(pair.stderr)
    except OSError as e:
        raise LaunchFailure(f"Cannot prepare log files {pair.stdout}, {pair.stderr}: {e}") from e

    _log.info(f"Redirecting output to {pair.stdout} and {pair.stderr}")

    # Anything still buffered belongs to the old destinations
    sys.stdout.flush()
    sys.stderr.flush()

    out_fd, err_fd = fds
    try:
        _redirect_fd(pair.stdout, out_fd)
        _redirect_fd(pair.stderr, err_fd)
    except OSError as e:
        raise LaunchFailure(f"Cannot open log files {pair.stdout}, {pair.stderr}: {e}") from e
    return pair
