"""Test port role resolution (static, bound indirection, defaults)."""

import pytest

from svclaunch.errors import InvalidPort, MissingConfiguration
from svclaunch.management.ports import (
    MONITORING_PORT,
    PortResolver,
    PortSpec,
    bound_port,
    parse_port,
    static_port,
)


class TestPortSpec:
    """Test variable naming of port specs."""

    def test_static_env_name(self):
        assert static_port("primary", "PRIMARY_PORT").env_name == "PORT_DEF_PRIMARY_PORT"

    def test_bound_env_name(self):
        assert bound_port("rpc", "RPC_PORT").env_name == "BOUND_PORT_DEF_RPC_PORT"

    def test_standard_ports_are_static(self):
        assert MONITORING_PORT.bound is False
        assert MONITORING_PORT.env_name == "PORT_DEF_MONITORING_PORT"


class TestStaticResolution:
    """Test PORT_DEF_ lookups."""

    def test_primary_port_from_environment(self):
        """PORT_DEF_PRIMARY_PORT=8080 resolves to {primary: 8080}."""
        resolver = PortResolver({"PORT_DEF_PRIMARY_PORT": "8080"})
        bindings = resolver.resolve_all([static_port("primary", "PRIMARY_PORT")])

        assert {role: b.port for role, b in bindings.items()} == {"primary": 8080}
        assert bindings["primary"].source == "PORT_DEF_PRIMARY_PORT"

    def test_whitespace_is_stripped(self):
        resolver = PortResolver({"PORT_DEF_PRIMARY_PORT": " 8080\n"})
        assert resolver.resolve(static_port("primary", "PRIMARY_PORT")).port == 8080

    def test_missing_static_port_raises(self):
        resolver = PortResolver({})
        with pytest.raises(MissingConfiguration) as exc_info:
            resolver.resolve(static_port("primary", "PRIMARY_PORT"))
        assert exc_info.value.variable == "PORT_DEF_PRIMARY_PORT"

    def test_empty_value_counts_as_unset(self):
        resolver = PortResolver({"PORT_DEF_PRIMARY_PORT": ""})
        with pytest.raises(MissingConfiguration):
            resolver.resolve(static_port("primary", "PRIMARY_PORT"))


class TestBoundResolution:
    """Test BOUND_PORT_DEF_ double indirection."""

    def test_follows_indirection(self):
        resolver = PortResolver({
            "BOUND_PORT_DEF_RPC_PORT": "NOMAD_PORT_rpc",
            "NOMAD_PORT_rpc": "31022",
        })
        binding = resolver.resolve(bound_port("rpc", "RPC_PORT"))

        assert binding.port == 31022
        assert binding.source == "NOMAD_PORT_rpc"

    def test_indirection_is_single_level(self):
        """The target's value is the port, never another name."""
        resolver = PortResolver({
            "BOUND_PORT_DEF_RPC_PORT": "FIRST",
            "FIRST": "SECOND",
            "SECOND": "31022",
        })
        with pytest.raises(InvalidPort):
            resolver.resolve(bound_port("rpc", "RPC_PORT"))

    def test_unset_bound_port_uses_default(self):
        """Unset BOUND_PORT_DEF_CACHE_TCP_DISC_PORT falls back to 47500."""
        resolver = PortResolver({})
        binding = resolver.resolve(bound_port("cache-tcp-disc", "CACHE_TCP_DISC_PORT", default=47500))

        assert binding.port == 47500
        assert binding.source == "default"

    def test_unset_target_uses_default(self):
        resolver = PortResolver({"BOUND_PORT_DEF_CACHE_TCP_DISC_PORT": "NOMAD_PORT_disc"})
        binding = resolver.resolve(bound_port("cache-tcp-disc", "CACHE_TCP_DISC_PORT", default=47500))
        assert binding.port == 47500

    def test_missing_bound_variable_names_it(self):
        resolver = PortResolver({})
        with pytest.raises(MissingConfiguration) as exc_info:
            resolver.resolve(bound_port("rpc", "RPC_PORT"))
        assert exc_info.value.variable == "BOUND_PORT_DEF_RPC_PORT"

    def test_missing_target_names_the_target(self):
        resolver = PortResolver({"BOUND_PORT_DEF_RPC_PORT": "NOMAD_PORT_rpc"})
        with pytest.raises(MissingConfiguration) as exc_info:
            resolver.resolve(bound_port("rpc", "RPC_PORT"))

        assert exc_info.value.variable == "NOMAD_PORT_rpc"
        assert "BOUND_PORT_DEF_RPC_PORT" in str(exc_info.value)

    def test_resolve_indirect_of_nothing(self):
        assert PortResolver({}).resolve_indirect(None) == (None, None)


class TestResolveAll:
    """Test resolving a whole descriptor's ports."""

    def test_first_missing_role_stops_resolution(self):
        resolver = PortResolver({"PORT_DEF_A_PORT": "1000"})
        specs = [static_port("a", "A_PORT"), static_port("b", "B_PORT"), static_port("c", "C_PORT")]

        with pytest.raises(MissingConfiguration) as exc_info:
            resolver.resolve_all(specs)
        assert exc_info.value.variable == "PORT_DEF_B_PORT"

    def test_mixed_specs(self):
        resolver = PortResolver({
            "PORT_DEF_A_PORT": "1000",
            "BOUND_PORT_DEF_B_PORT": "B_TARGET",
            "B_TARGET": "2000",
        })
        bindings = resolver.resolve_all([
            static_port("a", "A_PORT"),
            bound_port("b", "B_PORT"),
            PortSpec("c", "C_PORT", default=3000),
        ])
        assert [b.port for b in bindings.values()] == [1000, 2000, 3000]


class TestParsePort:
    """Test port value validation."""

    @pytest.mark.parametrize("value,expected", [
        ("1", 1),
        ("8080", 8080),
        ("65535", 65535),
        (443, 443),
    ])
    def test_valid_ports(self, value, expected):
        assert parse_port("primary", value) == expected

    @pytest.mark.parametrize("value", ["0", "65536", "-1", "80a", "8080.0", "", "abc", "²", "٨٠٨٠", True, 0, 70000])
    def test_invalid_ports(self, value):
        with pytest.raises(InvalidPort) as exc_info:
            parse_port("primary", value, "PORT_DEF_PRIMARY_PORT")
        assert exc_info.value.role == "primary"
        assert "PORT_DEF_PRIMARY_PORT" in str(exc_info.value)

    def test_resolver_rejects_out_of_range(self):
        resolver = PortResolver({"PORT_DEF_PRIMARY_PORT": "99999"})
        with pytest.raises(InvalidPort):
            resolver.resolve(static_port("primary", "PRIMARY_PORT"))

    def test_resolver_rejects_superscript_digit(self):
        resolver = PortResolver({"PORT_DEF_PRIMARY_PORT": "²"})
        with pytest.raises(InvalidPort) as exc_info:
            resolver.resolve(static_port("primary", "PRIMARY_PORT"))
        assert exc_info.value.value == "²"

    def test_invalid_default_is_rejected(self):
        with pytest.raises(InvalidPort):
            PortResolver({}).resolve(static_port("primary", "PRIMARY_PORT", default=0))
