"""svcctl - Command-line inspection of the svclaunch service catalog."""

__version__ = "0.1.0"
