"""
import / from tags
------------------
Make macros defined in another template callable from this one.

{% import "forms.html" field %}
{% import "forms.html" field as f, button %}              — aliasing
{% from "forms.html" import helper %}                     — non-exported macros too
{% from "forms.html" import helper as h with context %}   — clause accepted, no effect

``import`` only sees macros declared with ``export``; ``from … import``
sees every macro of the target file.  Names are resolved once, at parse
time; a missing macro is a compile error of the importing template.

At render time the node installs one callable per imported macro into the
render context's private namespace, under its local (aliased) name.
"""

from __future__ import annotations

import io
import logging
from types import MappingProxyType
from typing import Mapping

from macrotpl.core.errors import EmptyImportError, TemplateError, UnresolvedMacroError
from ..context import RenderContext
from ..lexer import Token, TokenType
from ..nodes import Node
from .registry import DirectiveRegistry
from .tag_macro import MacroDefinition, bind_macro

logger = logging.getLogger(__name__)


class ImportNode(Node):
    """
    Result of one import/from tag.

    ``macros`` maps local name → MacroDefinition of the imported template and
    is never empty.  ``context_names`` holds the local names that carried a
    ``with context`` clause; it is recorded for introspection only.
    """

    def __init__(
        self,
        position: Token,
        filename: str,
        macros: Mapping[str, MacroDefinition],
        context_names: frozenset[str] = frozenset(),
    ) -> None:
        self.position = position
        self.filename = filename
        self.macros: Mapping[str, MacroDefinition] = MappingProxyType(dict(macros))
        self.context_names = frozenset(context_names)

    def execute(self, ctx: RenderContext, out: io.StringIO) -> None:
        for name, macro in self.macros.items():
            ctx.private[name] = bind_macro(macro, ctx)

    def __repr__(self) -> str:
        names = ", ".join(
            local if macro.name == local else f"{macro.name} as {local}"
            for local, macro in self.macros.items()
        )
        return f"<ImportNode {self.filename!r}: {names}>"


# -----------------------------------------------------------------------------

def _load_target(doc, start: Token, arguments, tag_label: str):
    """Parse the filename argument and compile the referenced template."""
    filename_token = arguments.match_type(TokenType.STRING)
    if filename_token is None:
        raise arguments.error(f"{tag_label} needs a filename as string.")

    template_set = doc.template.template_set
    filename = template_set.resolve_filename(doc.template, filename_token.value)

    if arguments.remaining() == 0:
        raise arguments.error("You must at least specify one macro to import.", cls=EmptyImportError)

    try:
        target = template_set.from_file(filename)
    except TemplateError as exc:
        exc.update_from_token_if_needed(doc.template, start)
        raise

    return filename, target


def _parse_macro_list(
    arguments,
    target,
    filename: str,
    *,
    exported_only: bool,
    allow_with_context: bool,
) -> tuple[dict[str, MacroDefinition], set[str]]:
    """
    Parse ``name [as alias] (, name [as alias])*`` and resolve each name in
    *target*: against its exported macros only when *exported_only*, else
    against all of its macros.  Later duplicates of a local name win.
    """
    available = target.exported_macros if exported_only else target.macros
    # Same shape for both forms; the from-form searches every macro, so
    # "not exported" is never the reason there.
    not_found = "Macro '{}' not found (or not exported) in '{}'." if exported_only \
        else "Macro '{}' not found in '{}'."

    macros: dict[str, MacroDefinition] = {}
    context_names: set[str] = set()

    while arguments.remaining() > 0:
        name_token = arguments.match_type(TokenType.IDENTIFIER)
        if name_token is None:
            raise arguments.error("Expected macro name (identifier).")

        local_name = name_token.value
        if arguments.match(TokenType.KEYWORD, "as") is not None:
            alias_token = arguments.match_type(TokenType.IDENTIFIER)
            if alias_token is None:
                raise arguments.error("Expected macro alias name (identifier).")
            local_name = alias_token.value

        macro = available.get(name_token.value)
        if macro is None:
            raise arguments.error(
                not_found.format(name_token.value, filename),
                name_token,
                cls=UnresolvedMacroError,
                macro_name=name_token.value,
                source=filename,
            )

        macros[local_name] = macro
        context_names.discard(local_name)

        if arguments.remaining() == 0:
            break

        if allow_with_context and arguments.match_one(TokenType.IDENTIFIER, "with", "context"):
            if arguments.match(TokenType.IDENTIFIER, "context") is None:
                raise arguments.error("Expected with 'context'.")
            context_names.add(local_name)
            if arguments.remaining() == 0:
                break

        if arguments.match(TokenType.SYMBOL, ",") is None:
            raise arguments.error("Expected ','.")

    return macros, context_names


# -----------------------------------------------------------------------------

def register(registry: DirectiveRegistry) -> None:

    @registry.register("import")
    def parse_import(doc, start: Token, arguments) -> ImportNode:
        filename, target = _load_target(doc, start, arguments, "Import-tag")

        macros, _ = _parse_macro_list(
            arguments, target, filename, exported_only=True, allow_with_context=False,
        )
        logger.debug("import %s into %s: %s", filename, doc.template.name, sorted(macros))
        return ImportNode(start, filename, macros)

    @registry.register("from")
    def parse_from_import(doc, start: Token, arguments) -> ImportNode:
        filename, target = _load_target(doc, start, arguments, "From-tag")

        keyword = arguments.match_type(TokenType.IDENTIFIER)
        if keyword is None:
            raise arguments.error("Expected 'import' keyword after macro file.")
        if keyword.value != "import":
            raise arguments.error(f"Expected 'import' keyword after macro file, found {keyword.value}.", keyword)

        if arguments.remaining() == 0:
            raise arguments.error("You must at least specify one macro to import.", cls=EmptyImportError)

        macros, context_names = _parse_macro_list(
            arguments, target, filename, exported_only=False, allow_with_context=True,
        )
        logger.debug("from %s import into %s: %s", filename, doc.template.name, sorted(macros))
        return ImportNode(start, filename, macros, frozenset(context_names))
