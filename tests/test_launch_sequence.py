"""Test the init -> resolve -> redirect -> launch sequence and process launchers."""

import os
import signal

import pytest

from svclaunch.base_service import LaunchSpec
from svclaunch.errors import ExternalToolFailure, LaunchFailure, MissingConfiguration
from svclaunch.launchers import BaseLauncher, ExecLauncher, SpawnLauncher
from svclaunch.services.coordination import CoordinationLauncher
from svclaunch.services.gateway import GatewayLauncher
from tests.helpers.scripts import write_script


class RecordingLauncher(BaseLauncher):
    """Launcher that records redirect and launch into the trace file."""

    def __init__(self, trace_file):
        super().__init__("recording", redirect=self.record_redirect)
        self.trace_file = trace_file
        self.sinks = None
        self.spec = None

    def _record(self, line):
        with open(self.trace_file, "a") as f:
            f.write(line + "\n")

    def record_redirect(self, sinks):
        self.sinks = sinks
        self._record("redirect")

    def launch_process(self, spec):
        self.spec = spec
        self._record("launch")
        return 0


@pytest.fixture
def coordination_env():
    return {"BOUND_PORT_DEF_RPC_PORT": "NOMAD_PORT_rpc", "NOMAD_PORT_rpc": "31200"}


class TestSequenceOrdering:
    """Test that every step runs once, in order."""

    def test_full_sequence(self, make_context, coordination_env, trace_file, trace, service_dirs):
        service = CoordinationLauncher(make_context(coordination_env))
        launcher = RecordingLauncher(trace_file)

        assert launcher.run(service) == 0

        assert trace() == [
            "init",
            "provider debug_port",
            "provider jmx_port",
            "provider logging_conf_directory",
            "provider min_heap_opt",
            "provider java_opts",
            "redirect",
            "launch",
        ]
        assert launcher.sinks.stdout == service_dirs["logs"] / "coordination-service.stdout"
        assert launcher.spec.argv[3:] == ["9100", "9101", "31100", "31200", "31101"]

    def test_prepare_does_not_redirect_or_launch(self, make_context, coordination_env, trace_file, trace):
        launcher = RecordingLauncher(trace_file)
        spec = launcher.prepare(CoordinationLauncher(make_context(coordination_env)))

        assert spec.executable == "/opt/aspen/scripts/start-vertx.sh"
        assert "redirect" not in trace()
        assert "launch" not in trace()


class TestSequenceFailures:
    """Test that a failing step stops everything after it."""

    def test_init_failure_stops_launch(self, make_context, coordination_env, tools_dir, trace_file, trace):
        write_script(tools_dir / "serviceInit.sh", f'echo init >> "{trace_file}"\nexit 1')
        launcher = RecordingLauncher(trace_file)

        with pytest.raises(ExternalToolFailure):
            launcher.run(CoordinationLauncher(make_context(coordination_env)))

        assert trace() == ["init"]
        assert launcher.spec is None

    def test_missing_port_stops_before_any_provider(self, make_context, trace_file, trace):
        """No helper that needs ports runs before every port role is bound."""
        launcher = RecordingLauncher(trace_file)

        with pytest.raises(MissingConfiguration) as exc_info:
            launcher.run(CoordinationLauncher(make_context()))

        assert exc_info.value.variable == "BOUND_PORT_DEF_RPC_PORT"
        assert trace() == ["init"]

    def test_discovery_failure_stops_gateway(self, make_context, tools_dir, trace_file, trace):
        write_script(tools_dir / "discoveryData.sh", f'echo "discovery $2" >> "{trace_file}"\nexit 1')
        env = {"PORT_DEF_RAFT_RPC_PORT": "7100", "PORT_DEF_METADATA_RPC_PORT": "7101"}
        launcher = RecordingLauncher(trace_file)

        with pytest.raises(ExternalToolFailure):
            launcher.run(GatewayLauncher(make_context(env)))

        assert trace()[-1] == "discovery INITIAL_CONFIG"
        assert "redirect" not in trace()
        assert launcher.spec is None


class TestLocateExecutable:
    """Test binary lookup before exec."""

    def test_missing_path(self, tmp_path):
        with pytest.raises(LaunchFailure, match="not found"):
            BaseLauncher.locate_executable(str(tmp_path / "nope"))

    def test_not_executable(self, tmp_path):
        binary = tmp_path / "binary"
        binary.write_text("data")
        binary.chmod(0o644)
        with pytest.raises(LaunchFailure, match="not executable"):
            BaseLauncher.locate_executable(str(binary))

    def test_executable_path(self, tmp_path):
        binary = write_script(tmp_path / "binary", "true")
        assert BaseLauncher.locate_executable(str(binary)) == str(binary)

    def test_bare_name_searches_target_path(self, tmp_path):
        write_script(tmp_path / "bin" / "my-service", "true")
        found = BaseLauncher.locate_executable("my-service", {"PATH": str(tmp_path / "bin")})
        assert found == str(tmp_path / "bin" / "my-service")

    def test_bare_name_not_on_path(self, tmp_path):
        with pytest.raises(LaunchFailure, match="PATH"):
            BaseLauncher.locate_executable("my-service", {"PATH": str(tmp_path)})

    def test_empty_binary(self):
        with pytest.raises(LaunchFailure):
            BaseLauncher.locate_executable("")


class TestExecLauncher:
    """Test process image replacement."""

    def test_execve_arguments(self, tmp_path, monkeypatch):
        binary = write_script(tmp_path / "start.sh", "true")
        calls = []
        monkeypatch.setattr(os, "execve", lambda path, argv, env: calls.append((path, argv, env)))
        spec = LaunchSpec(executable=str(binary), argv=[str(binary), "a", "b"], env={"K": "V"})

        ExecLauncher().launch_process(spec)

        assert calls == [(str(binary), [str(binary), "a", "b"], {"K": "V"})]

    def test_exec_error_is_launch_failure(self, tmp_path, monkeypatch):
        binary = write_script(tmp_path / "start.sh", "true")

        def failing_execve(path, argv, env):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(os, "execve", failing_execve)
        with pytest.raises(LaunchFailure):
            ExecLauncher().launch_process(LaunchSpec(str(binary), [str(binary)], {}))

    def test_missing_binary_never_execs(self, tmp_path, monkeypatch):
        monkeypatch.setattr(os, "execve", lambda *args: pytest.fail("execve called"))
        with pytest.raises(LaunchFailure):
            ExecLauncher().launch_process(LaunchSpec(str(tmp_path / "nope"), ["nope"], {}))


class TestSpawnLauncher:
    """Test running the target as a child."""

    def test_exit_code_propagates(self):
        spec = LaunchSpec("/bin/sh", ["/bin/sh", "-c", "exit 3"], {"PATH": os.defpath})
        launcher = SpawnLauncher()

        assert launcher.launch_process(spec) == 3
        assert launcher.process_info.args == ["/bin/sh", "-c", "exit 3"]

    def test_environment_is_passed(self, tmp_path):
        out = tmp_path / "env.txt"
        spec = LaunchSpec("/bin/sh", ["/bin/sh", "-c", f'echo "$LS_JAVA_OPTS" > "{out}"'],
                          {"LS_JAVA_OPTS": "-Djute.maxbuffer=4194304"})

        assert SpawnLauncher().launch_process(spec) == 0
        assert out.read_text() == "-Djute.maxbuffer=4194304\n"

    def test_killed_child_reports_128_plus_signal(self):
        spec = LaunchSpec("/bin/sh", ["/bin/sh", "-c", "kill -TERM $$"], {})
        assert SpawnLauncher().launch_process(spec) == 128 + signal.SIGTERM

    def test_signal_handlers_restored(self):
        before = signal.getsignal(signal.SIGTERM)
        SpawnLauncher().launch_process(LaunchSpec("/bin/sh", ["/bin/sh", "-c", "true"], {}))
        assert signal.getsignal(signal.SIGTERM) == before
