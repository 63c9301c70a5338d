"""
Parser
======
One class serves two roles:

* the **document parser**: walks every token of a template and builds the
  node tree, dispatching ``{% name … %}`` tags to the directive registry;
* the **argument cursor**: a Parser over just the tokens between a tag's
  name and its ``%}``, handed to the directive's parse function.

Directive parse functions have the signature::

    def parse_xxx(doc: Parser, start: Token, arguments: Parser) -> Node

where ``start`` is the tag-name token (used for error positions).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from macrotpl.core.errors import TemplateError, TemplateSyntaxError
from .lexer import Token, TokenType
from .nodes import (
    Attribute,
    Call,
    Expression,
    Literal,
    Node,
    OutputNode,
    Subscript,
    TextNode,
    Variable,
)

if TYPE_CHECKING:
    from .directives.registry import DirectiveRegistry

_KEYWORD_LITERALS = {"true": True, "false": False, "none": None}


class Parser:

    def __init__(
        self,
        tokens: list[Token],
        template=None,
        registry: Optional["DirectiveRegistry"] = None,
        sender: str = "parser",
        fallback: Optional[Token] = None,
    ) -> None:
        self.tokens = tokens
        self.template = template
        self.registry = registry
        self.sender = sender
        self._fallback = fallback
        self._idx = 0

    # ------------------------------------------------------------------ cursor

    def current(self) -> Optional[Token]:
        if self._idx < len(self.tokens):
            return self.tokens[self._idx]
        return None

    def consume(self) -> Optional[Token]:
        token = self.current()
        if token is not None:
            self._idx += 1
        return token

    def remaining(self) -> int:
        return len(self.tokens) - self._idx

    def peek(self, type_: TokenType, value: Optional[str] = None) -> Optional[Token]:
        token = self.current()
        if token is None or token.type is not type_:
            return None
        if value is not None and token.value != value:
            return None
        return token

    def match_type(self, type_: TokenType) -> Optional[Token]:
        """Consume and return the current token if it has type *type_*."""
        token = self.peek(type_)
        if token is not None:
            self._idx += 1
        return token

    def match(self, type_: TokenType, value: str) -> Optional[Token]:
        """Consume and return the current token if it has type *type_* and value *value*."""
        token = self.peek(type_, value)
        if token is not None:
            self._idx += 1
        return token

    def match_one(self, type_: TokenType, *values: str) -> Optional[Token]:
        """Like match(), accepting any one of *values*."""
        token = self.peek(type_)
        if token is not None and token.value in values:
            self._idx += 1
            return token
        return None

    # ------------------------------------------------------------------ errors

    @property
    def template_name(self) -> Optional[str]:
        return getattr(self.template, "name", None)

    def error(
        self,
        message: str,
        token: Optional[Token] = None,
        cls: type[TemplateError] = TemplateSyntaxError,
        **kwargs,
    ) -> TemplateError:
        """
        Build (not raise) an error positioned at *token*, or at the current
        token, or at the last token when the cursor is exhausted.
        """
        if token is None:
            token = self.current() or (self.tokens[-1] if self.tokens else self._fallback)
        return cls(message, sender=self.sender, filename=self.template_name, token=token, **kwargs)

    # ---------------------------------------------------------------- document

    def parse_document(self) -> list[Node]:
        nodes: list[Node] = []
        while self.remaining() > 0:
            nodes.append(self.parse_node())
        return nodes

    def parse_node(self) -> Node:
        token = self.current()

        if token.type is TokenType.TEXT:
            self.consume()
            return TextNode(token)

        if token.type is TokenType.VARIABLE_BEGIN:
            self.consume()
            expr = self.parse_expression()
            if self.match_type(TokenType.VARIABLE_END) is None:
                raise self.error("'}}' expected.")
            return OutputNode(token, expr)

        if token.type is TokenType.TAG_BEGIN:
            return self._parse_tag()

        raise self.error(f"Unexpected token '{token.value}'.")

    def wrap_until_tag(self, *names: str) -> tuple[list[Node], str, "Parser"]:
        """
        Parse nodes until one of the tags *names* is reached.

        Returns the nodes, the name of the closing tag and a Parser over the
        closing tag's own arguments.
        """
        nodes: list[Node] = []
        while self.remaining() > 0:
            if self.peek(TokenType.TAG_BEGIN) and self._idx + 1 < len(self.tokens):
                name_token = self.tokens[self._idx + 1]
                if name_token.type is TokenType.IDENTIFIER and name_token.value in names:
                    self._idx += 2
                    args = self._collect_tag_arguments()
                    return nodes, name_token.value, Parser(
                        args, self.template, self.registry,
                        sender=f"tag:{name_token.value}", fallback=name_token,
                    )
            nodes.append(self.parse_node())

        raise self.error(f"Unexpected end of template, expected {' or '.join(repr(n) for n in names)}.")

    def _parse_tag(self) -> Node:
        self.consume()   # {%
        name_token = self.match_type(TokenType.IDENTIFIER)
        if name_token is None:
            raise self.error("Tag name must be an identifier.")

        directive = self.registry.get(name_token.value) if self.registry is not None else None
        if directive is None:
            raise self.error(f"Tag '{name_token.value}' does not exist.", name_token)

        arguments = Parser(
            self._collect_tag_arguments(),
            self.template,
            self.registry,
            sender=f"tag:{name_token.value}",
            fallback=name_token,
        )
        node = directive(self, name_token, arguments)
        if arguments.remaining() > 0:
            raise arguments.error("Malformed tag arguments.")
        return node

    def _collect_tag_arguments(self) -> list[Token]:
        """Consume everything up to and including the next %} and return the inner tokens."""
        args: list[Token] = []
        while self.remaining() > 0:
            token = self.consume()
            if token.type is TokenType.TAG_END:
                return args
            args.append(token)
        raise self.error("Tag is not closed with '%}'.")

    # ------------------------------------------------------------- expressions

    def parse_expression(self) -> Expression:
        expr = self._parse_primary()
        while True:
            if self.match(TokenType.SYMBOL, "."):
                name = self.match_type(TokenType.IDENTIFIER)
                if name is None:
                    raise self.error("Expected attribute name after '.'.")
                expr = Attribute(name, expr, name.value)
            elif self.match(TokenType.SYMBOL, "("):
                expr = Call(expr.token, expr, self._parse_call_arguments())
            elif self.match(TokenType.SYMBOL, "["):
                key = self.parse_expression()
                if self.match(TokenType.SYMBOL, "]") is None:
                    raise self.error("Expected ']'.")
                expr = Subscript(expr.token, expr, key)
            else:
                return expr

    def _parse_call_arguments(self) -> list[Expression]:
        args: list[Expression] = []
        if self.match(TokenType.SYMBOL, ")"):
            return args
        while True:
            args.append(self.parse_expression())
            if self.match(TokenType.SYMBOL, ")"):
                return args
            if self.match(TokenType.SYMBOL, ",") is None:
                raise self.error("Expected ',' or ')'.")

    def _parse_primary(self) -> Expression:
        token = self.current()
        if token is None:
            raise self.error("Expected an expression.")

        if token.type is TokenType.STRING:
            self.consume()
            return Literal(token, token.value)

        if token.type is TokenType.NUMBER:
            self.consume()
            return Literal(token, float(token.value) if "." in token.value else int(token.value))

        if token.type is TokenType.KEYWORD and token.value in _KEYWORD_LITERALS:
            self.consume()
            return Literal(token, _KEYWORD_LITERALS[token.value])

        if token.type is TokenType.IDENTIFIER:
            self.consume()
            return Variable(token)

        if self.match(TokenType.SYMBOL, "("):
            expr = self.parse_expression()
            if self.match(TokenType.SYMBOL, ")") is None:
                raise self.error("Expected ')'.")
            return expr

        raise self.error(f"Unexpected token '{token.value}' in expression.")
