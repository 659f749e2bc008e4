"""Outbound policy mirroring service (Vert.x)."""

from svclaunch.base_service import launcher
from svclaunch.services.common import VertxServiceLauncher


@launcher("mirror-out")
class MirrorOutLauncher(VertxServiceLauncher):
    """Outbound policy mirroring service."""
    log_name = "policy-mirror-out"
