"""Curses browser and Docker command helpers for a Docker Swarm's nodes, services and stacks."""

__version__ = "0.1.0"
__all__ = ["__version__"]