"""Terminal browser for the nodes, services and stacks of a Docker swarm."""

from __future__ import annotations

import argparse
import curses
import socket
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from typing import Callable, Sequence

from swarmcli.docker import (
    DockerError,
    get_container_count,
    get_docker_version,
    get_service_count,
    get_swarm_cpu_usage,
    get_swarm_mem_usage,
    list_stacks,
    list_swarm_nodes,
    list_swarm_services,
)

VERSION = "dev"
COMMANDS = ("nodes", "services", "stacks")
INSPECT_TITLE = "Inspect (press ESC to go back)"

_REFRESH_SECONDS = 5.0
_POLL_MS = 500
_KEY_ESC = 27
_KEY_TAB = 9
_KEY_CTRL_C = 3
_ENTER_KEYS = (10, 13, curses.KEY_ENTER)
_BACKSPACE_KEYS = (8, 127, curses.KEY_BACKSPACE)

_INSPECT_SUBCOMMANDS = {
    "nodes": ("node", "inspect"),
    "services": ("service", "inspect"),
    "stacks": ("stack", "services"),
}

Runner = Callable[[Sequence[str]], str]


class InspectError(Exception):
    """Raised when an inspect command fails."""


def autocomplete_command(text: str) -> str:
    """Complete ``text`` to the first known command it is a prefix of.

    Text that matches no command is returned unchanged.
    """
    prefix = text.strip()
    for command in COMMANDS:
        if command.startswith(prefix):
            return command
    return text


def inspect_command(mode: str, item: str) -> list[str] | None:
    """Return the docker command that shows details of ``item`` in ``mode``."""
    subcommand = _INSPECT_SUBCOMMANDS.get(mode)
    if subcommand is None:
        return None
    return ["docker", *subcommand, item]


def footer_text(mode: str, inspecting: bool) -> str:
    """Return the status line shown at the bottom of the screen."""
    if inspecting:
        return f" <{mode}>  <inspect>"
    return f" <{mode}> "


def context_lines(
    hostname: str, version: str, docker_version: str, mem_usage: str, cpu_usage: str
) -> list[tuple[str, str]]:
    """Return the (padded label, value) rows of the context panel."""
    entries = (
        ("Context:", hostname),
        ("Version:", version),
        ("Docker version:", docker_version),
        ("RAM:", mem_usage),
        ("CPU:", cpu_usage),
    )
    return [(f"{label:<16}", value) for label, value in entries]


def _run_combined(args: Sequence[str]) -> str:
    """Run a command and return its combined stdout and stderr."""
    try:
        result = subprocess.run(list(args), stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
    except OSError as exc:
        raise InspectError(f"inspect error: {exc}") from exc
    output = result.stdout.decode("utf-8", errors="replace")
    if result.returncode != 0:
        raise InspectError(f"inspect error: exit status {result.returncode} {output}")
    return output


@dataclass
class Browser:
    """Navigation state of the swarm browser, independent of the screen."""

    mode: str = "nodes"
    view_stack: list[str] = field(default_factory=list)
    inspecting: bool = False
    cursor: int = 0
    origin: int = 0
    output: str = ""

    def __init__(self, mode: str = "nodes") -> None:
        self.mode = mode
        self.view_stack = []
        self.inspecting = False
        self.cursor = 0
        self.origin = 0
        self.output = ""

    def execute_command(self, text: str) -> str:
        """Switch to the mode named by ``text`` if it is a known command."""
        command = text.strip()
        if command in COMMANDS:
            self.mode = command
        return self.mode

    def inspect(self, line: str, runner: Runner = _run_combined) -> str | None:
        """Inspect the item whose name starts ``line`` and show the output."""
        self.view_stack.append(self.mode)
        words = line.split()
        if not words:
            return None
        args = inspect_command(self.mode, words[0])
        if args is None:
            return None
        output = runner(args)
        self.inspecting = True
        self.output = output
        self.cursor = 0
        self.origin = 0
        return output

    def go_back(self) -> str:
        """Leave inspect mode and return to the previous listing."""
        self.inspecting = False
        if self.view_stack:
            self.mode = self.view_stack.pop()
        self.cursor = 0
        self.origin = 0
        return self.mode

    def cursor_down(self) -> None:
        if self.inspecting:
            self.origin += 1
        else:
            self.cursor += 1

    def cursor_up(self) -> None:
        if self.inspecting:
            if self.origin > 0:
                self.origin -= 1
        elif self.cursor > 0:
            self.cursor -= 1

    def title(self) -> str:
        if self.inspecting:
            return INSPECT_TITLE
        return self.mode.title()


class _StatusUpdater(threading.Thread):
    """Background thread that refreshes swarm usage figures periodically."""

    def __init__(self) -> None:
        super().__init__(daemon=True)
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._values = {
            "cpu": "0%",
            "mem": "0%",
            "containers": "0",
            "services": "0",
            "docker_version": "unknown",
        }
        self.generation = 0

    def run(self) -> None:
        while not self._stop_event.is_set():
            values = {
                "cpu": get_swarm_cpu_usage(),
                "mem": get_swarm_mem_usage(),
                "containers": get_container_count(),
                "services": get_service_count(),
                "docker_version": get_docker_version(),
            }
            with self._lock:
                self._values = values
                self.generation += 1
            self._stop_event.wait(_REFRESH_SECONDS)

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._values)

    def stop(self) -> None:
        self._stop_event.set()


def _list_rows(mode: str) -> list[str]:
    listers = {
        "nodes": list_swarm_nodes,
        "services": list_swarm_services,
        "stacks": list_stacks,
    }
    lister = listers.get(mode)
    if lister is None:
        return []
    try:
        return [str(item) for item in lister()]
    except DockerError:
        return []


def _init_colors() -> dict[str, int]:
    names = ("label", "value", "main", "selected", "footer", "footer_inspect", "command")
    if not curses.has_colors():
        attrs = dict.fromkeys(names, curses.A_NORMAL)
        attrs["selected"] = curses.A_REVERSE
        attrs["footer"] = curses.A_REVERSE
        attrs["footer_inspect"] = curses.A_REVERSE
        return attrs
    curses.start_color()
    try:
        curses.use_default_colors()
        background = -1
    except curses.error:
        background = curses.COLOR_BLACK
    pairs = {
        "label": (curses.COLOR_YELLOW, background),
        "value": (curses.COLOR_WHITE, background),
        "main": (curses.COLOR_CYAN, background),
        "selected": (curses.COLOR_BLACK, curses.COLOR_CYAN),
        "footer": (curses.COLOR_BLACK, curses.COLOR_YELLOW),
        "footer_inspect": (curses.COLOR_BLACK, curses.COLOR_CYAN),
        "command": (curses.COLOR_CYAN, background),
    }
    attrs = {}
    for number, (name, (fg, bg)) in enumerate(pairs.items(), start=1):
        curses.init_pair(number, fg, bg)
        attrs[name] = curses.color_pair(number)
    return attrs


def _put(window, y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
    height, width = window.getmaxyx()
    if not 0 <= y < height or x >= width:
        return
    try:
        window.addnstr(y, x, text, width - x - 1, attr)
    except curses.error:
        pass


def _main_area(height: int, command_open: bool) -> tuple[int, int]:
    top = 10 if command_open else 9
    return top, height - 4


def _visible_rows(height: int, command_open: bool) -> int:
    top, bottom = _main_area(height, command_open)
    return max(bottom - top, 1)


def _draw(stdscr, browser: Browser, rows: list[str], command: str | None,
          status: dict[str, str], colors: dict[str, int]) -> None:
    stdscr.erase()
    height, width = stdscr.getmaxyx()

    hostname = socket.gethostname()
    for y, (label, value) in enumerate(
        context_lines(hostname, VERSION, status["docker_version"], status["mem"], status["cpu"])
    ):
        _put(stdscr, y, 0, label, colors["label"])
        _put(stdscr, y, len(label), value, colors["value"])

    if command is not None:
        _put(stdscr, 8, 0, "Command: > " + command, colors["command"])

    top, bottom = _main_area(height, command is not None)
    title = f" {browser.title()} "
    _put(stdscr, top, 0, ("\u2500" + title).ljust(width - 1, "\u2500"), colors["main"])
    visible = _visible_rows(height, command is not None)

    if browser.inspecting:
        lines = browser.output.splitlines()
        for offset, line in enumerate(lines[browser.origin:browser.origin + visible]):
            _put(stdscr, top + 1 + offset, 0, line, colors["value"])
    else:
        start = max(0, browser.cursor - visible + 1)
        for offset, row in enumerate(rows[start:start + visible]):
            index = start + offset
            attr = colors["selected"] if index == browser.cursor else colors["main"]
            _put(stdscr, top + 1 + offset, 0, row.ljust(width - 1), attr)

    footer_attr = colors["footer_inspect"] if browser.inspecting else colors["footer"]
    _put(stdscr, height - 2, 0, footer_text(browser.mode, browser.inspecting), footer_attr)
    stdscr.refresh()


def _clamp(browser: Browser, rows: list[str]) -> None:
    if browser.inspecting:
        last = max(len(browser.output.splitlines()) - 1, 0)
        browser.origin = min(browser.origin, last)
    else:
        browser.cursor = min(browser.cursor, max(len(rows) - 1, 0))


def _selected_line(browser: Browser, rows: list[str]) -> str:
    if browser.inspecting:
        lines = browser.output.splitlines()
        index = browser.origin + browser.cursor
    else:
        lines = rows
        index = browser.cursor
    return lines[index] if 0 <= index < len(lines) else ""


def run(stdscr) -> None:
    """Run the interactive browser on a curses screen until the user quits."""
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    if hasattr(curses, "set_escdelay"):
        curses.set_escdelay(25)
    stdscr.keypad(True)
    stdscr.timeout(_POLL_MS)
    colors = _init_colors()

    browser = Browser()
    status = _StatusUpdater()
    status.start()
    command: str | None = None
    rows = _list_rows(browser.mode)
    seen = status.generation

    try:
        while True:
            if status.generation != seen:
                seen = status.generation
                if not browser.inspecting:
                    rows = _list_rows(browser.mode)
            _clamp(browser, rows)
            _draw(stdscr, browser, rows, command, status.snapshot(), colors)

            key = stdscr.getch()
            if key == -1:
                continue
            if key == _KEY_CTRL_C:
                return

            if command is not None:
                if key == _KEY_ESC:
                    command = None
                elif key in _ENTER_KEYS:
                    browser.execute_command(command)
                    command = None
                    rows = _list_rows(browser.mode)
                elif key == _KEY_TAB:
                    command = autocomplete_command(command)
                elif key in _BACKSPACE_KEYS:
                    command = command[:-1]
                elif 32 <= key < 127:
                    command += chr(key)
                continue

            if key == ord("q"):
                return
            if key == curses.KEY_DOWN:
                browser.cursor_down()
            elif key == curses.KEY_UP:
                browser.cursor_up()
            elif key in (_KEY_ESC, ord("b")):
                browser.go_back()
                rows = _list_rows(browser.mode)
            elif key == ord("i"):
                browser.inspect(_selected_line(browser, rows))
            elif key == ord(":"):
                command = ""
    finally:
        status.stop()


def main(argv: Sequence[str] | None = None) -> int:
    """Start the swarm browser."""
    parser = argparse.ArgumentParser(
        prog="swarmcli", description="Browse the nodes, services and stacks of a Docker swarm."
    )
    parser.add_argument("--version", action="version", version=VERSION)
    parser.parse_args(argv)
    try:
        curses.wrapper(run)
    except KeyboardInterrupt:
        return 0
    except InspectError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())