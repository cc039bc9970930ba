"""Domain-layer primitives for the Telldus client."""

from .commands import SUPPORTED_METHODS, Command, command_names, lookup_command
from .ids import ids_match, normalize_item_id
from .state import CollectionCache

__all__ = [
    "SUPPORTED_METHODS",
    "CollectionCache",
    "Command",
    "command_names",
    "ids_match",
    "lookup_command",
    "normalize_item_id",
]
