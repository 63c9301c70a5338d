"""
macro tag
---------
Defines a named, parameterised fragment that can be called like a function.

{% macro field(name, type="text") %}<input name="{{ name }}" type="{{ type }}">{% endmacro %}
{% macro button(label) export %}<button>{{ label }}</button>{% endmacro %}

``export`` makes the macro visible to ``{% import %}`` in other templates;
``{% from … import %}`` can reach every macro of a template.

At render time the tag writes nothing; it installs the macro into the
render context's private namespace so ``{{ field("email") }}`` works.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Callable, Optional

from markupsafe import Markup

from macrotpl.core.errors import TemplateRenderError
from ..context import RenderContext
from ..lexer import Token, TokenType
from ..nodes import Expression, Node, execute_nodes
from .registry import DirectiveRegistry

logger = logging.getLogger(__name__)


class MacroDefinition(Node):

    def __init__(
        self,
        position: Token,
        name: str,
        params: list[tuple[str, Optional[Expression]]],
        body: list[Node],
        exported: bool = False,
        template_name: Optional[str] = None,
    ) -> None:
        self.position = position
        self.name = name
        self.params = params
        self.body = body
        self.exported = exported
        self.template_name = template_name

    def execute(self, ctx: RenderContext, out: io.StringIO) -> None:
        ctx.private[self.name] = bind_macro(self, ctx)

    def call(self, ctx: RenderContext, args: list[Any]) -> Markup:
        """Render the macro body with *args* bound to its parameters."""
        if len(args) > len(self.params):
            raise TemplateRenderError(
                f"Macro '{self.name}' takes {len(self.params)} argument(s), {len(args)} given.",
                sender=f"macro:{self.name}",
                filename=self.template_name,
                token=self.position,
            )

        if ctx.depth >= ctx.max_depth:
            raise TemplateRenderError(
                f"Macro '{self.name}': maximum call depth ({ctx.max_depth}) reached.",
                sender=f"macro:{self.name}",
                filename=self.template_name,
                token=self.position,
            )

        macro_ctx = ctx.child()
        for i, (param, default) in enumerate(self.params):
            if i < len(args):
                macro_ctx.private[param] = args[i]
            elif default is not None:
                macro_ctx.private[param] = default.evaluate(ctx)
            else:
                macro_ctx.private[param] = None

        out = io.StringIO()
        ctx.calls.append(self.name)
        try:
            execute_nodes(self.body, macro_ctx, out)
        finally:
            ctx.calls.pop()
        return Markup(out.getvalue())

    def __repr__(self) -> str:
        flag = " export" if self.exported else ""
        return f"<MacroDefinition {self.name}({', '.join(p for p, _ in self.params)}){flag} in {self.template_name}>"


# -----------------------------------------------------------------------------

def bind_macro(macro: MacroDefinition, ctx: RenderContext) -> Callable[..., Markup]:
    """Return a callable that invokes *macro* against *ctx*."""
    def call_macro(*args: Any) -> Markup:
        return macro.call(ctx, list(args))

    call_macro.__name__ = macro.name
    return call_macro


# -----------------------------------------------------------------------------

def register(registry: DirectiveRegistry) -> None:

    @registry.register("macro")
    def parse_macro(doc, start: Token, arguments) -> MacroDefinition:
        name_token = arguments.match_type(TokenType.IDENTIFIER)
        if name_token is None:
            raise arguments.error("Macro-tag needs at least an identifier as name.")

        if arguments.match(TokenType.SYMBOL, "(") is None:
            raise arguments.error("Expected '('.")

        params: list[tuple[str, Optional[Expression]]] = []
        if arguments.match(TokenType.SYMBOL, ")") is None:
            while True:
                param = arguments.match_type(TokenType.IDENTIFIER)
                if param is None:
                    raise arguments.error("Expected argument name as identifier.")
                if any(p == param.value for p, _ in params):
                    raise arguments.error(f"Duplicate argument '{param.value}'.", param)

                default = None
                if arguments.match(TokenType.SYMBOL, "="):
                    default = arguments.parse_expression()
                params.append((param.value, default))

                if arguments.match(TokenType.SYMBOL, ")"):
                    break
                if arguments.match(TokenType.SYMBOL, ",") is None:
                    raise arguments.error("Expected ',' or ')'.")

        exported = arguments.match(TokenType.KEYWORD, "export") is not None
        if arguments.remaining() > 0:
            raise arguments.error("Malformed macro-tag.")

        template = doc.template
        if name_token.value in template.macros:
            raise arguments.error(
                f"Another macro with name '{name_token.value}' already registered.", name_token,
            )

        body, _, end_args = doc.wrap_until_tag("endmacro")
        if end_args.remaining() > 0:
            raise end_args.error("Arguments not allowed here.")

        macro = MacroDefinition(
            start, name_token.value, params, body,
            exported=exported, template_name=template.name,
        )
        template.add_macro(macro)
        logger.debug("Defined macro %r (exported=%s) in %s", macro.name, exported, template.name)
        return macro
