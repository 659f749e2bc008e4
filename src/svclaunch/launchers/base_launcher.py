"""Base class for process launchers and the launch sequence.

A launch always runs these steps, in this order, once:

1. initialize   service init hook (serviceInit.sh)
2. resolve      ports, options, fetched configuration
3. redirect     rotate and capture stdout/stderr into SERVICE_LOG_DIR
4. launch       replace this process (exec) or run the target (spawn)

Any LaunchError stops the sequence where it happens. Nothing is retried.
"""

import logging
import os
import shutil
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from svclaunch.errors import LaunchError, LaunchFailure
from svclaunch.management.logs import LogSinkPair, redirect_to_log

if TYPE_CHECKING:
    import argparse

    from svclaunch.base_service import LaunchSpec, ServiceLauncher


DEFAULT_CONFIG_FILE = "config/launcher.yaml"
SERVICE_ENV_VAR = "SVCLAUNCH_SERVICE"


class BaseLauncher(ABC):
    """Base class for process launchers.

    Subclasses decide how the final LaunchSpec becomes a running process.
    """

    def __init__(
        self,
        launcher_id: str = "launcher",
        redirect: Callable[[LogSinkPair], Any] | None = None
    ):
        self.launcher_id = launcher_id
        self.logger = logging.getLogger(f"lch|{launcher_id}")
        self.redirect = redirect or redirect_to_log

    @staticmethod
    def locate_executable(binary: str, env: Mapping[str, str] | None = None) -> str:
        """Return the path to exec for a binary.

        Paths (anything containing a separator) must exist and be executable;
        bare names are searched on the target environment's PATH.

        Raises:
            LaunchFailure: If the binary is missing or not executable
        """
        if not binary:
            raise LaunchFailure("No binary configured")

        if os.sep in binary or (os.altsep and os.altsep in binary):
            path = Path(binary)
            if not path.is_file():
                raise LaunchFailure(f"Binary not found: {binary}")
            if not os.access(path, os.X_OK):
                raise LaunchFailure(f"Binary is not executable: {binary}")
            return binary

        search_path = (env or {}).get("PATH", os.defpath)
        found = shutil.which(binary, path=search_path)
        if found is None:
            raise LaunchFailure(f"Binary not found on PATH: {binary}")
        return found

    def prepare(self, service: "ServiceLauncher") -> "LaunchSpec":
        """Run the init hook and resolve everything; returns the final invocation."""
        self.logger.info(f"Initializing {service.name}")
        service.initialize()

        self.logger.info(f"Resolving configuration for {service.name}")
        config = service.resolve()
        for role, binding in config.ports.items():
            self.logger.debug(f"Port {role} = {binding.port} ({binding.source})")

        return service.build_launch(config)

    def run(self, service: "ServiceLauncher") -> int:
        """Full sequence. In exec mode this does not return on success."""
        spec = self.prepare(service)
        sinks = service.log_sinks()
        self.redirect(sinks)
        return self.launch_process(spec)

    @abstractmethod
    def launch_process(self, spec: "LaunchSpec") -> int:
        """Start the target described by spec.

        Returns:
            Exit code to report (only for launchers that outlive the target)
        """
        pass

    def _get_launcher_type_display(self) -> str:
        """Get display name for banner."""
        return self.__class__.__name__

    @staticmethod
    def prepare_cli_argument_parser() -> "argparse.ArgumentParser":
        """Create and return ArgumentParser with common launcher options."""
        import argparse

        parser = argparse.ArgumentParser(add_help=False)

        parser.add_argument(
            "service",
            nargs="?",
            default=None,
            help=f"Service to launch (default: ${SERVICE_ENV_VAR})"
        )
        parser.add_argument(
            "--config",
            default=None,
            help=f"Path to launcher config file (default: {DEFAULT_CONFIG_FILE})"
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Initialize and resolve, print the command line, do not launch"
        )
        parser.add_argument(
            "--no-banner",
            action="store_true",
            help="Suppress startup banner"
        )
        parser.add_argument(
            "--no-color",
            action="store_true",
            help="Disable colored logging (use plain text)"
        )

        return parser

    @staticmethod
    def setup_logging(use_color: bool, level: int = logging.INFO):
        """Setup logging based on color preference.

        Args:
            use_color: If True, use Rich colored logging; if False, use plain text

        Both variants write to stderr, which is the service .stderr sink once
        output has been redirected.
        """
        if not use_color:
            logging.basicConfig(
                level=level,
                format='%(asctime)s.%(msecs)03d [%(levelname)-5s] [%(name)-15s] %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
        else:
            from rich.console import Console
            from rich.logging import RichHandler
            logging.basicConfig(
                level=level,
                format='%(message)s',
                handlers=[RichHandler(
                    console=Console(stderr=True),
                    show_time=True,
                    show_level=True,
                    show_path=False,
                    rich_tracebacks=True,
                    tracebacks_show_locals=False,
                    log_time_format='%Y-%m-%d %H:%M:%S'
                )]
            )

    @staticmethod
    def determine_config_file(config_arg: str | None) -> str | None:
        """Determine and validate config file from argument.

        Returns:
            Path to config file, or None when the default does not exist

        Raises:
            SystemExit: If explicitly provided config file doesn't exist
        """
        logger = logging.getLogger("launch")

        if config_arg is not None:
            # User explicitly provided --config, file MUST exist
            if not Path(config_arg).exists():
                logger.error(f"Configuration file not found: {config_arg}")
                logger.error("Explicitly provided config file must exist. Exiting.")
                sys.exit(1)
            logger.info(f"Using config file: {config_arg}")
            return config_arg

        if not Path(DEFAULT_CONFIG_FILE).exists():
            logger.debug(f"Default config file not found: {DEFAULT_CONFIG_FILE}, using built-in defaults")
            return None

        logger.info(f"Using default config file: {DEFAULT_CONFIG_FILE}")
        return DEFAULT_CONFIG_FILE

    @classmethod
    def launch(cls, launcher_factory, parser_customizer=None, argv: list[str] | None = None) -> int:
        """Common launcher orchestration for all entry points.

        Handles environment loading, argument parsing, logging setup, config
        loading and the launch sequence.

        Args:
            launcher_factory: Callable(args) -> BaseLauncher
            parser_customizer: Optional Callable(parser) -> parser
            argv: Arguments to parse (default: sys.argv[1:])

        Returns:
            Process exit code (only reached on failure, dry run, or spawn mode)
        """
        from svclaunch.base_service import LaunchContext
        from svclaunch.management.configuration import create_configuration_manager
        from svclaunch.management.environment import LauncherSettings, load_dotenv_if_available
        from svclaunch.management.service_registry import ServiceRegistry

        env_loaded, env_file_path = load_dotenv_if_available()

        parser = cls.prepare_cli_argument_parser()
        if parser_customizer:
            parser = parser_customizer(parser)
        args = parser.parse_args(argv)

        cls.setup_logging(use_color=not args.no_color)
        logger = logging.getLogger("launch")

        if env_loaded and env_file_path:
            logger.info(f"Loaded environment from {env_file_path}")

        # The one and only read of the process environment
        settings = LauncherSettings.from_environ()

        service_name = args.service or settings.get(SERVICE_ENV_VAR)
        if not service_name:
            logger.error(f"No service given (pass SERVICE or set {SERVICE_ENV_VAR})")
            return 1

        config_file = cls.determine_config_file(args.config)

        try:
            manager = create_configuration_manager(config_file, environ=settings.environ)
            manager.log_sources()
            config = manager.resolve_config(service_name)
            registry = ServiceRegistry(config)
            service_class = registry.get_launcher_class(service_name)

            service = service_class(LaunchContext.create(settings, config))
            launcher = launcher_factory(args)

            if not args.no_banner:
                logger.info("=" * 60)
                logger.info(f"svclaunch - {service_name}")
                logger.info(f"Launcher: {launcher._get_launcher_type_display()}")
                logger.info("=" * 60)

            if args.dry_run:
                spec = launcher.prepare(service)
                print(spec.command_line)
                return 0

            return launcher.run(service)

        # OSError: files the sequence reads or writes itself (templates, copies)
        except (LaunchError, yaml.YAMLError, OSError) as e:
            logger.error(f"Launch of {service_name} failed: {e}")
            return 1
