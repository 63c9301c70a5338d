"""
DirectiveRegistry — central store of all ``{% tag %}`` parse functions.

A directive parse function receives the document parser, the tag-name token
and a Parser over the tag's arguments, and returns a node:

    def parse_xxx(doc: Parser, start: Token, arguments: Parser) -> Node

Register with the decorator:
    @directive_registry.register("hello")
    def parse_hello(doc, start, arguments):
        return HelloNode(start)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from ..lexer import Token
    from ..nodes import Node
    from ..parser import Parser

logger = logging.getLogger(__name__)


DirectiveParser = Callable[["Parser", "Token", "Parser"], "Node"]


class DirectiveRegistry:
    def __init__(self) -> None:
        self._parsers: dict[str, DirectiveParser] = {}

    # ---------------------------------------------------------------- register

    def register(self, name: str):
        """
        Decorator that registers a function as a directive parser.

        Usage::

            @directive_registry.register("import")
            def parse_import(doc, start, arguments):
                ...
        """
        def decorator(fn: DirectiveParser) -> DirectiveParser:
            self.register_directive(name, fn)
            return fn
        return decorator

    def register_directive(self, name: str, fn: DirectiveParser) -> None:
        previous = self._parsers.get(name)
        if previous is not None and previous is not fn:
            logger.warning("Directive '%s' re-registered (%s replaces %s)",
                           name, fn.__qualname__, previous.__qualname__)
        self._parsers[name] = fn
        logger.debug("Registered directive: %s", name)

    # ------------------------------------------------------------------ lookup

    def has(self, name: str) -> bool:
        return name in self._parsers

    def get(self, name: str) -> Optional[DirectiveParser]:
        return self._parsers.get(name)

    # ---------------------------------------------------------- introspection

    def registered_names(self) -> list[str]:
        return sorted(self._parsers.keys())


# Singleton shared across the application
directive_registry = DirectiveRegistry()
