"""Command-line client for the sensor insights dashboard."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    # Resolve ``cli.app`` to the module, not the Typer instance it defines.
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)


__all__: list[str] = []
