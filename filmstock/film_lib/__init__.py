"""Film image resolution, storage and capture-crop helpers."""

from . import config, log, names, catalog, resolver, store, crop  # noqa: F401

__all__ = [
    "config",
    "log",
    "names",
    "catalog",
    "resolver",
    "store",
    "crop",
]
