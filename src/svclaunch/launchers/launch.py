"""svclaunch entry point.

Launches one service, chosen by name:

    # Replace this process with the service (default)
    svclaunch coordination

    # Service name from the environment, as used by the platform
    SVCLAUNCH_SERVICE=gateway svclaunch

    # Keep the launcher as parent, forwarding signals
    svclaunch --mode spawn collector

    # Show what would run, without redirecting logs or launching
    svclaunch --dry-run --no-banner cache
"""

import argparse
import sys


def customize_parser(base_parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Add launch mode selection to the common parser."""
    parser = argparse.ArgumentParser(
        prog="svclaunch",
        description="Resolve service configuration and launch the service binary",
        parents=[base_parser],
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Launch modes:
  exec   The service binary replaces this process (default)
  spawn  The service runs as a child; SIGTERM/SIGINT/SIGHUP are forwarded
         and the launcher exits with the child's exit code
        """
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=["exec", "spawn"],
        default="exec",
        help="Launch mode (default: exec)"
    )
    return parser


def factory(args):
    """Create launcher based on --mode choice."""
    from svclaunch.launchers.process import ExecLauncher, SpawnLauncher

    if args.mode == "spawn":
        return SpawnLauncher()
    return ExecLauncher()


def main(argv: list[str] | None = None) -> int:
    from svclaunch.launchers.base_launcher import BaseLauncher

    return BaseLauncher.launch(factory, customize_parser, argv)


if __name__ == "__main__":
    sys.exit(main())
