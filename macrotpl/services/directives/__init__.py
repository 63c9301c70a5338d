"""
Directive subsystem — public API.
"""

from .registry import DirectiveRegistry, directive_registry
from .builtins import default_registry, register_all_builtins
from .tag_import import ImportNode
from .tag_macro import MacroDefinition, bind_macro

__all__ = [
    "DirectiveRegistry",
    "directive_registry",
    "default_registry",
    "register_all_builtins",
    "ImportNode",
    "MacroDefinition",
    "bind_macro",
]
