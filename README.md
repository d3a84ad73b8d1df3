# swarmcli

swarmcli is a small curses browser for a Docker Swarm. It lists the swarm's
nodes, services or stacks, and above the list it shows the host name, the
swarm's Docker server version and the combined CPU and memory usage of the
running containers. The figures are refreshed in the background every five
seconds, and the list is reloaded with them unless you are inspecting an item.

Everything is read by running the `docker` command line tool, so `docker` has
to be on your `PATH` and pointed at a swarm manager. The screen uses Python's
`curses` module, so a POSIX terminal is needed.

## Install

```
pip install .
```

## Run

```
swarmcli
```

`swarmcli --version` prints the version and exits.

## Keys

| Key            | Action                                              |
|----------------|-----------------------------------------------------|
| Up / Down      | Move the selection, or scroll while inspecting      |
| `i`            | Inspect the selected node, service or stack         |
| Esc / `b`      | Leave the inspect view and go back                  |
| `:`            | Open the command prompt                             |
| Tab            | Complete the command typed at the prompt            |
| Backspace      | Delete the last character at the prompt             |
| Enter          | Run the command at the prompt                       |
| Esc (prompt)   | Close the prompt                                    |
| `q` / Ctrl-C   | Quit                                                |

The prompt accepts `nodes`, `services` and `stacks`, which switch the list to
that kind of object; anything else leaves the list as it is. Tab replaces the
typed text with the first of those commands that it is a prefix of.

Inspecting a node or service shows the output of `docker node inspect` or
`docker service inspect`; inspecting a stack shows `docker stack services`.
If that command fails, swarmcli leaves the screen, prints the error and exits
with status 1.

## Using it from Python

The Docker queries in `swarmcli.docker` can be used on their own:

```python
from swarmcli.docker import list_swarm_nodes, list_swarm_services, get_swarm_cpu_usage

for node in list_swarm_nodes():
    print(node)

print(get_swarm_cpu_usage())
```

`list_swarm_nodes()`, `list_swarm_services()` and `list_stacks()` return
`SwarmNode`, `SwarmService` and `Stack` records; printing one gives its fields
joined by spaces. `parse_nodes()`, `parse_services()` and `parse_stacks()`
turn tab-separated `docker ... ls --format` output into the same records.

If a `docker` command cannot be run or exits with an error, `run_docker_cmd()`
and the listing functions raise `swarmcli.docker.DockerError`. The usage and
count helpers (`get_swarm_cpu_usage()`, `get_swarm_mem_usage()`,
`get_container_count()`, `get_service_count()`) fall back to `"0%"` or `"0"`
instead, and `get_docker_version()` to `"unknown"`.

`swarmcli.app.Browser` holds the browser's navigation state (mode, cursor,
scroll position, inspect output) without any screen, and `swarmcli.app.run()`
drives it on a curses screen.

## Tests

```
pip install .[test]
pytest
```