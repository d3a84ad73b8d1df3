[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "swarmcli"
version = "0.1.0"
description = "A terminal browser for Docker Swarm nodes, services and stacks"
requires-python = ">=3.10"
dependencies = []
keywords = ["docker", "swarm", "terminal", "tui", "curses", "cluster"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console :: Curses",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
swarmcli = "swarmcli.app:main"

[tool.hatch.build.targets.wheel]
packages = ["swarmcli"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
