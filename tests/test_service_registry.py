"""Test launcher registration and service name resolution."""

import pytest

from svclaunch.base_service import ServiceLauncher, get_launcher_class, launcher
from svclaunch.management.service_registry import (
    ServiceClassNotFoundError,
    ServiceRegistry,
    ServiceTypeNotFoundError,
)
from svclaunch.services.coordination import CoordinationLauncher
from svclaunch.services.mirror_in import MirrorInLauncher


BUILTIN_SERVICES = {
    "agent", "cache", "cassandra", "chronos", "collector", "coordination", "data", "elastic",
    "gateway", "grafana", "logstash", "mapi", "mirror-in", "mirror-out", "prometheus", "query",
    "vault",
}


class TestLauncherDecorator:
    """Test @launcher registration."""

    def test_registers_class(self):
        @launcher("registry-test-service")
        class RegistryTestLauncher(ServiceLauncher):
            def build_launch(self, config):
                raise NotImplementedError

        assert get_launcher_class("registry-test-service") is RegistryTestLauncher
        assert RegistryTestLauncher.descriptor().name == "registry-test-service"
        assert RegistryTestLauncher.descriptor().log_name == "registry-test-service-service"

    def test_requires_string_name(self):
        with pytest.raises(TypeError):
            launcher(CoordinationLauncher)

    def test_requires_non_empty_name(self):
        with pytest.raises(ValueError):
            launcher("")


class TestServiceRegistry:
    """Test name to module mapping."""

    def test_default_module_maps_dashes(self):
        assert ServiceRegistry().resolve_module("mirror-in") == "svclaunch.services.mirror_in"

    def test_registry_entry_wins(self):
        registry = ServiceRegistry({"registry": {"billing": "acme.launchers.billing"}})
        assert registry.resolve_module("billing") == "acme.launchers.billing"

    def test_null_registry_entry_uses_default(self):
        registry = ServiceRegistry({"registry": {"coordination": None}})
        assert registry.resolve_module("coordination") == "svclaunch.services.coordination"

    def test_get_builtin_launcher(self):
        registry = ServiceRegistry()
        assert registry.get_launcher_class("coordination") is CoordinationLauncher
        assert registry.get_launcher_class("mirror-in") is MirrorInLauncher

    def test_unknown_service(self):
        with pytest.raises(ServiceTypeNotFoundError):
            ServiceRegistry().get_launcher_class("no-such-service")

    def test_unknown_external_package(self):
        registry = ServiceRegistry({"registry": {"billing": "acme_not_installed.launchers.billing"}})
        with pytest.raises(ServiceTypeNotFoundError):
            registry.get_launcher_class("billing")

    def test_module_without_launcher(self):
        registry = ServiceRegistry({"registry": {"bogus": "svclaunch.services.common"}})
        with pytest.raises(ServiceClassNotFoundError):
            registry.get_launcher_class("bogus")

    def test_list_launchers_includes_builtins(self):
        launchers = ServiceRegistry().list_launchers()
        assert BUILTIN_SERVICES <= set(launchers)
        assert list(launchers) == sorted(launchers)


class TestDescriptors:
    """Test static service definitions."""

    def test_jvm_descriptor(self):
        descriptor = CoordinationLauncher.descriptor()
        assert descriptor.uses_standard_ports is True
        assert descriptor.binary == "/opt/aspen/scripts/start-vertx.sh"
        assert [spec.env_name for spec in descriptor.ports] == ["BOUND_PORT_DEF_RPC_PORT"]
        assert descriptor.description == "Metadata coordination service."

    @pytest.mark.parametrize("name,log_name", [
        ("cache", "metadata-cache-service"),
        ("mirror-out", "policy-mirror-out"),
        ("prometheus", "metrics-service"),
        ("gateway", "gateway-service"),
    ])
    def test_log_names(self, name, log_name):
        assert ServiceRegistry().get_launcher_class(name).descriptor().log_name == log_name
