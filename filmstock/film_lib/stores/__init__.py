"""Store classes for persistent app state."""
from .json_store import BaseJSONStore
from .flag_store import FlagStore

__all__ = [
    'BaseJSONStore',
    'FlagStore',
]
