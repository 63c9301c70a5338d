"""
Node tree
=========
A compiled template is a list of nodes.  Each node writes its output to a
text buffer when executed against a RenderContext.

Expressions (the inside of ``{{ … }}`` and directive arguments) are a
separate, tiny tree evaluated to plain Python values.
"""

from __future__ import annotations

import io
from typing import Any

from markupsafe import escape

from macrotpl.core.errors import TemplateRenderError
from .context import RenderContext
from .lexer import Token


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------

class Node:
    position: Token | None = None

    def execute(self, ctx: RenderContext, out: io.StringIO) -> None:
        raise NotImplementedError


class TextNode(Node):
    def __init__(self, token: Token) -> None:
        self.position = token
        self.text = token.value

    def execute(self, ctx: RenderContext, out: io.StringIO) -> None:
        out.write(self.text)


class OutputNode(Node):
    """``{{ expr }}``"""

    def __init__(self, token: Token, expr: "Expression") -> None:
        self.position = token
        self.expr = expr

    def execute(self, ctx: RenderContext, out: io.StringIO) -> None:
        value = self.expr.evaluate(ctx)
        if value is None:
            return
        out.write(str(escape(value)) if ctx.autoescape else str(value))


def execute_nodes(nodes: list[Node], ctx: RenderContext, out: io.StringIO) -> None:
    for node in nodes:
        node.execute(ctx, out)


# -----------------------------------------------------------------------------
# Expressions
# -----------------------------------------------------------------------------

class Expression:
    token: Token

    def evaluate(self, ctx: RenderContext) -> Any:
        raise NotImplementedError

    def _error(self, message: str, ctx: RenderContext) -> TemplateRenderError:
        return TemplateRenderError(
            message,
            sender="render",
            filename=getattr(ctx.template, "name", None),
            token=self.token,
        )


class Literal(Expression):
    def __init__(self, token: Token, value: Any) -> None:
        self.token = token
        self.value = value

    def evaluate(self, ctx: RenderContext) -> Any:
        return self.value


class Variable(Expression):
    def __init__(self, token: Token) -> None:
        self.token = token
        self.name = token.value

    def evaluate(self, ctx: RenderContext) -> Any:
        return ctx.lookup(self.name)


class Attribute(Expression):
    """``obj.name``: mapping key first, then attribute."""

    def __init__(self, token: Token, target: Expression, name: str) -> None:
        self.token = token
        self.target = target
        self.name = name

    def evaluate(self, ctx: RenderContext) -> Any:
        obj = self.target.evaluate(ctx)
        if obj is None:
            return None
        if isinstance(obj, dict):
            return obj.get(self.name)
        if self.name.startswith("_"):
            return None
        return getattr(obj, self.name, None)


class Subscript(Expression):
    def __init__(self, token: Token, target: Expression, key: Expression) -> None:
        self.token = token
        self.target = target
        self.key = key

    def evaluate(self, ctx: RenderContext) -> Any:
        obj = self.target.evaluate(ctx)
        key = self.key.evaluate(ctx)
        try:
            return obj[key]
        except (KeyError, IndexError, TypeError):
            return None


class Call(Expression):
    def __init__(self, token: Token, target: Expression, args: list[Expression]) -> None:
        self.token = token
        self.target = target
        self.args = args

    def evaluate(self, ctx: RenderContext) -> Any:
        fn = self.target.evaluate(ctx)
        if not callable(fn):
            raise self._error(f"'{self.target.token.value}' is not callable.", ctx)
        return fn(*[arg.evaluate(ctx) for arg in self.args])
