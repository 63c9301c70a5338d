"""
Built-in directive registrations.
Call register_all_builtins() once at application startup, or let
default_registry() do it the first time a TemplateSet needs a registry.
"""

from functools import lru_cache
from typing import Optional

from .registry import DirectiveRegistry, directive_registry
from . import (
    tag_import,
    tag_macro,
)


def register_all_builtins(registry: Optional[DirectiveRegistry] = None) -> DirectiveRegistry:
    """Register every built-in directive with *registry* (default: the shared one)."""
    registry = registry if registry is not None else directive_registry
    tag_macro.register(registry)
    tag_import.register(registry)
    return registry


@lru_cache
def default_registry() -> DirectiveRegistry:
    return register_all_builtins(directive_registry)
