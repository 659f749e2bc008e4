"""Process launchers."""

from .base_launcher import BaseLauncher
from .process import ExecLauncher, SpawnLauncher


__all__ = [
    'BaseLauncher',
    'ExecLauncher',
    'SpawnLauncher',
]
