"""Celeste mod metadata, object configuration and expression evaluation."""

__version__ = "0.1.0"

__all__ = [
    "auto_saver",
    "config",
    "drawing",
    "entity_env",
    "everest_yaml",
    "expression",
    "object_config",
    "selectable",
]