import subprocess
from unittest import mock

import pytest

from swarmcli import docker
from swarmcli.docker import (
    DockerError,
    Stack,
    SwarmNode,
    SwarmService,
    get_container_count,
    get_docker_version,
    get_service_count,
    get_swarm_cpu_usage,
    get_swarm_mem_usage,
    list_stacks,
    list_swarm_nodes,
    list_swarm_services,
    parse_nodes,
    parse_services,
    parse_stacks,
    run_docker_cmd,
)


def _completed(stdout: bytes) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(["docker"], 0, stdout=stdout, stderr=b"")


def _failing():
    return subprocess.CalledProcessError(1, ["docker"], output=b"", stderr=b"daemon down")


def test_node_str_joins_fields():
    node = SwarmNode("abc", "host1", "Ready", "Active", "Leader")
    assert str(node) == "abc host1 Ready Active Leader"


def test_service_and_stack_str():
    assert str(SwarmService("web", "replicated", "2/2")) == "web replicated 2/2"
    assert str(Stack("app", "4", "Swarm")) == "app 4 Swarm"


def test_parse_nodes_skips_short_rows():
    assert parse_nodes("id1\tmanager\tReady\n") == []
    assert parse_nodes("") == []


def test_parse_services_accepts_str_and_bytes():
    text = "web\treplicated\t2/2\napi\tglobal\t1/1"
    assert parse_services(text) == parse_services(text.encode())
    assert [s.name for s in parse_services(text)] == ["web", "api"]


def test_parse_stacks_ignores_extra_columns():
    stacks = parse_stacks("app\t4\tSwarm\textra")
    assert stacks == [Stack("app", "4", "Swarm")]


def test_run_docker_cmd_passes_arguments():
    with mock.patch("swarmcli.docker.subprocess.run", return_value=_completed(b"out")) as run:
        assert run_docker_cmd("ps", "-q") == b"out"
    assert run.call_args.args[0] == ["docker", "ps", "-q"]


def test_run_docker_cmd_raises_on_failure():
    with mock.patch("swarmcli.docker.subprocess.run", side_effect=_failing()):
        with pytest.raises(DockerError) as info:
            run_docker_cmd("ps")
    assert info.value.returncode == 1
    assert info.value.stderr == b"daemon down"


def test_run_docker_cmd_raises_when_missing():
    with mock.patch("swarmcli.docker.subprocess.run", side_effect=FileNotFoundError("docker")):
        with pytest.raises(DockerError):
            run_docker_cmd("ps")


def test_list_swarm_nodes_uses_format():
    output = b"id1\tmanager\tReady\tActive\tLeader\n"
    with mock.patch("swarmcli.docker.subprocess.run", return_value=_completed(output)) as run:
        nodes = list_swarm_nodes()
    assert nodes == parse_nodes(output)
    assert run.call_args.args[0] == [
        "docker", "node", "ls", "--format",
        "{{.ID}}\t{{.Hostname}}\t{{.Status}}\t{{.Availability}}\t{{.ManagerStatus}}",
    ]


def test_list_services_and_stacks():
    output = b"web\treplicated\t2/2\n"
    with mock.patch("swarmcli.docker.subprocess.run", return_value=_completed(output)):
        assert list_swarm_services() == [SwarmService("web", "replicated", "2/2")]
        assert list_stacks() == [Stack("web", "replicated", "2/2")]


def test_list_propagates_errors():
    with mock.patch("swarmcli.docker.subprocess.run", side_effect=_failing()):
        with pytest.raises(DockerError):
            list_swarm_nodes()


def test_cpu_usage_sums_and_formats():
    with mock.patch("swarmcli.docker.subprocess.run", return_value=_completed(b"12.5%\nN/A\n")):
        assert get_swarm_cpu_usage() == "12.5%"


def test_mem_usage_empty_output():
    with mock.patch("swarmcli.docker.subprocess.run", return_value=_completed(b"")):
        assert get_swarm_mem_usage() == "0.0%"


def test_usage_on_error():
    with mock.patch("swarmcli.docker.subprocess.run", side_effect=_failing()):
        assert get_swarm_cpu_usage() == "0%"
        assert get_swarm_mem_usage() == "0%"


def test_container_count():
    ids = ["aaa", "bbb", "ccc"]
    stdout = ("\n".join(ids) + "\n").encode()
    with mock.patch("swarmcli.docker.subprocess.run", return_value=_completed(stdout)):
        assert get_container_count() == str(len(ids))


def test_counts_zero_on_empty_and_error():
    with mock.patch("swarmcli.docker.subprocess.run", return_value=_completed(b"\n")):
        assert get_service_count() == "0"
    with mock.patch("swarmcli.docker.subprocess.run", side_effect=_failing()):
        assert get_container_count() == "0"
        assert get_service_count() == "0"


def test_docker_version():
    with mock.patch("swarmcli.docker.subprocess.run", return_value=_completed(b"24.0.7\n")):
        assert get_docker_version() == "24.0.7"
    with mock.patch.object(docker.subprocess, "run", side_effect=_failing()):
        assert get_docker_version() == "unknown"