"""Name -> provider class lookup, filled in as provider modules are imported."""

import importlib
import pkgutil
from typing import Dict, Type

from .base import BaseProvider

_PROVIDERS: Dict[str, Type[BaseProvider]] = {}
_SKIP = {"base", "registry"}


def register_provider(name: str):
    """Class decorator: make a provider available under ``name`` in config."""
    def register(cls: Type[BaseProvider]) -> Type[BaseProvider]:
        if not issubclass(cls, BaseProvider):
            raise TypeError(f"Cannot register {cls.__name__}: not a BaseProvider")
        _PROVIDERS[name] = cls
        return cls
    return register


def discover_providers() -> None:
    """Import the transport modules of this package so they register."""
    package = importlib.import_module(__package__)
    for module in pkgutil.iter_modules(package.__path__):
        if module.name not in _SKIP:
            importlib.import_module(f"{__package__}.{module.name}")


def get_registry() -> Dict[str, Type[BaseProvider]]:
    return dict(_PROVIDERS)
