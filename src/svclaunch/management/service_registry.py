"""Service Registry for launcher discovery.

The ServiceRegistry maps service names to Python modules holding their
@launcher classes.

Usage:
    registry = ServiceRegistry(config)
    launcher_class = registry.get_launcher_class('mirror-in')
    module_path = registry.resolve_module('mirror-in')   # svclaunch.services.mirror_in
"""

import importlib
import logging
import pkgutil
from typing import Any

from svclaunch.base_service import ServiceLauncher, get_launcher_class, list_registered_launchers
from svclaunch.errors import LaunchError

_log = logging.getLogger("svc.registry")


class ServiceRegistryError(LaunchError):
    """Base exception for service registry errors."""
    pass


class ServiceTypeNotFoundError(ServiceRegistryError):
    """Raised when no module exists for a service name."""
    pass


class ServiceClassNotFoundError(ServiceRegistryError):
    """Raised when a module was imported but registers no launcher for the name."""
    pass


class ServiceRegistry:
    """Registry for service name to module path mapping.

    Configuration format (launcher.yaml):

        registry:
          coordination: ~                      # -> svclaunch.services.coordination
          billing: acme.launchers.billing      # external package

    Names not in the registry fall back to the built-in package, with dashes
    mapped to underscores ('mirror-in' -> svclaunch.services.mirror_in).
    """

    DEFAULT_MODULE_PREFIX = "svclaunch.services"

    def __init__(self, config: dict[str, Any] | None = None):
        self.registry: dict[str, str | None] = {}
        self._loaded_modules: set[str] = set()

        if config is not None:
            self.registry = dict(config.get("registry") or {})

        _log.debug(f"ServiceRegistry initialized with {len(self.registry)} entries")

    def _default_module(self, service_name: str) -> str:
        return f"{self.DEFAULT_MODULE_PREFIX}.{service_name.replace('-', '_')}"

    def resolve_module(self, service_name: str) -> str:
        """Resolve service name to Python module path."""
        module_path = self.registry.get(service_name)
        if module_path is None:
            module_path = self._default_module(service_name)
            _log.debug(f"Resolved '{service_name}' via default -> '{module_path}'")
        else:
            _log.debug(f"Resolved '{service_name}' via registry -> '{module_path}'")
        return module_path

    def get_launcher_class(self, service_name: str) -> type[ServiceLauncher]:
        """Import the service module and return its registered launcher class.

        Raises:
            ServiceTypeNotFoundError: If the module does not exist
            ServiceClassNotFoundError: If the module has no @launcher(service_name) class
        """
        module_path = self.resolve_module(service_name)

        if module_path not in self._loaded_modules:
            _log.debug(f"Importing module '{module_path}' for service '{service_name}'")
            try:
                importlib.import_module(module_path)
            except ModuleNotFoundError as e:
                if e.name and module_path.startswith(e.name):
                    raise ServiceTypeNotFoundError(
                        f"Unknown service '{service_name}' (no module '{module_path}')"
                    ) from e
                raise
            self._loaded_modules.add(module_path)

        launcher_class = get_launcher_class(service_name)

        if launcher_class is None:
            raise ServiceClassNotFoundError(
                f"Module '{module_path}' was imported but no @launcher('{service_name}') "
                f"decorated class was found"
            )

        return launcher_class

    def load_builtin(self) -> None:
        """Import every module of the built-in services package."""
        package = importlib.import_module(self.DEFAULT_MODULE_PREFIX)
        for module_info in pkgutil.iter_modules(package.__path__):
            module_path = f"{self.DEFAULT_MODULE_PREFIX}.{module_info.name}"
            if module_path not in self._loaded_modules:
                importlib.import_module(module_path)
                self._loaded_modules.add(module_path)

    def list_launchers(self) -> dict[str, type[ServiceLauncher]]:
        """All built-in launchers plus those named in the registry section."""
        self.load_builtin()
        for service_name in self.registry:
            self.get_launcher_class(service_name)
        return dict(sorted(list_registered_launchers().items()))
