"""Access to a Docker swarm through the ``docker`` command line tool."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Callable, TypeVar

from swarmcli.utils import count_non_empty_lines, fields_as_strings, parse_and_sum_percent_lines

_NODE_FORMAT = "{{.ID}}\t{{.Hostname}}\t{{.Status}}\t{{.Availability}}\t{{.ManagerStatus}}"
_SERVICE_FORMAT = "{{.Name}}\t{{.Mode}}\t{{.Replicas}}"
_STACK_FORMAT = "{{.Name}}\t{{.Services}}\t{{.Orchestrator}}"


class DockerError(Exception):
    """Raised when a docker command cannot be run or exits with an error."""

    def __init__(self, message: str, returncode: int | None = None, stderr: bytes = b""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


@dataclass(frozen=True)
class SwarmNode:
    id: str
    hostname: str
    status: str
    availability: str
    manager_status: str

    def __str__(self) -> str:
        return " ".join(fields_as_strings(self))


@dataclass(frozen=True)
class SwarmService:
    name: str
    mode: str
    replicas: str

    def __str__(self) -> str:
        return " ".join(fields_as_strings(self))


@dataclass(frozen=True)
class Stack:
    name: str
    services: str
    orchestrator: str

    def __str__(self) -> str:
        return " ".join(fields_as_strings(self))


def run_docker_cmd(name: str, *args: str) -> bytes:
    """Run ``docker <name> <args...>`` and return its standard output."""
    command = ["docker", name, *args]
    try:
        result = subprocess.run(command, capture_output=True, check=True)
    except subprocess.CalledProcessError as exc:
        raise DockerError(
            f"{' '.join(command)} exited with status {exc.returncode}",
            returncode=exc.returncode,
            stderr=exc.stderr or b"",
        ) from exc
    except OSError as exc:
        raise DockerError(f"cannot run {' '.join(command)}: {exc}") from exc
    return result.stdout


def _lines(output: bytes | str) -> list[str]:
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    return output.strip().split("\n")


T = TypeVar("T")


def _parse_rows(output: bytes | str, width: int, build: Callable[..., T]) -> list[T]:
    rows = []
    for line in _lines(output):
        parts = line.split("\t")
        if len(parts) >= width:
            rows.append(build(*parts[:width]))
    return rows


def parse_nodes(output: bytes | str) -> list[SwarmNode]:
    """Parse tab-separated ``docker node ls`` output."""
    return _parse_rows(output, 5, SwarmNode)


def parse_services(output: bytes | str) -> list[SwarmService]:
    """Parse tab-separated ``docker service ls`` output."""
    return _parse_rows(output, 3, SwarmService)


def parse_stacks(output: bytes | str) -> list[Stack]:
    """Parse tab-separated ``docker stack ls`` output."""
    return _parse_rows(output, 3, Stack)


def list_swarm_nodes() -> list[SwarmNode]:
    return parse_nodes(run_docker_cmd("node", "ls", "--format", _NODE_FORMAT))


def list_swarm_services() -> list[SwarmService]:
    return parse_services(run_docker_cmd("service", "ls", "--format", _SERVICE_FORMAT))


def list_stacks() -> list[Stack]:
    return parse_stacks(run_docker_cmd("stack", "ls", "--format", _STACK_FORMAT))


def _stats_total(field: str) -> str:
    try:
        output = run_docker_cmd("stats", "--no-stream", "--format", field)
    except DockerError:
        return "0%"
    return f"{parse_and_sum_percent_lines(_lines(output)):.1f}%"


def get_swarm_cpu_usage() -> str:
    """Total CPU percentage over running containers, e.g. ``'12.5%'``."""
    return _stats_total("{{.CPUPerc}}")


def get_swarm_mem_usage() -> str:
    """Total memory percentage over running containers, e.g. ``'12.5%'``."""
    return _stats_total("{{.MemPerc}}")


def _count(*args: str) -> str:
    try:
        output = run_docker_cmd(*args)
    except DockerError:
        return "0"
    return str(count_non_empty_lines(_lines(output)))


def get_container_count() -> str:
    return _count("ps", "-q")


def get_service_count() -> str:
    return _count("service", "ls", "-q")


def get_docker_version() -> str:
    try:
        output = run_docker_cmd("version", "--format", "{{.Server.Version}}")
    except DockerError:
        return "unknown"
    return output.decode("utf-8", errors="replace").strip()