#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Template errors
===============
Every error raised while lexing, parsing, loading or rendering a template
derives from TemplateError and carries (where known) the template filename
and the line/column of the offending token.

    TemplateError
    ├── TemplateSyntaxError      malformed directive or expression
    ├── EmptyImportError         import/from without any macro names
    ├── UnresolvedMacroError     requested macro missing in the target file
    ├── TemplateLoadError        target file cannot be loaded/compiled
    │   └── TemplateNotFoundError
    └── TemplateRenderError      failure while executing a template
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from macrotpl.services.lexer import Token


# -----------------------------------------------------------------------------

class TemplateError(Exception):
    """Base class; position fields may be filled in after construction."""

    def __init__(
        self,
        message: str,
        *,
        sender: str = "",
        filename: Optional[str] = None,
        token: Optional["Token"] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.sender = sender
        self.filename = filename
        self.token = token
        self.line = token.line if token is not None else 0
        self.column = token.column if token is not None else 0
        if token is not None and filename is None:
            self.filename = token.filename

    # -------------------------------------------------------------------------

    @property
    def has_position(self) -> bool:
        return self.line > 0

    def update_from_token_if_needed(self, template, token: Optional["Token"]) -> "TemplateError":
        """
        Attach *template*'s name and *token*'s position unless the error
        already knows where it happened.  Returns ``self`` so callers can
        ``raise exc.update_from_token_if_needed(...)``.
        """
        if self.has_position:
            return self
        if template is not None:
            self.filename = template.name
        if token is not None:
            self.token = token
            self.line = token.line
            self.column = token.column
        return self

    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        where = f" (where: {self.sender})" if self.sender else ""
        location = self.filename or "<string>"
        if self.has_position:
            location += f" | Line {self.line} Col {self.column}"
        if self.token is not None and self.token.value:
            location += f" near '{self.token.value}'"
        return f"[Error{where} in {location}] {self.message}"


# -----------------------------------------------------------------------------

class TemplateSyntaxError(TemplateError):
    pass


class EmptyImportError(TemplateError):
    pass


class UnresolvedMacroError(TemplateError):
    """A macro name could not be found in the imported template."""

    def __init__(self, message: str, *, macro_name: str, source: str, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.macro_name = macro_name
        self.source = source


class TemplateLoadError(TemplateError):
    pass


class TemplateNotFoundError(TemplateLoadError):
    pass


class TemplateRenderError(TemplateError):
    pass


# -----------------------------------------------------------------------------
