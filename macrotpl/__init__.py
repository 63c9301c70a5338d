"""
macrotpl — a small text-templating engine with cross-template macro imports.
"""

from macrotpl.core.errors import (
    EmptyImportError,
    TemplateError,
    TemplateLoadError,
    TemplateNotFoundError,
    TemplateRenderError,
    TemplateSyntaxError,
    UnresolvedMacroError,
)
from macrotpl.services import RenderContext, Template, TemplateSet

__all__ = [
    "EmptyImportError",
    "TemplateError",
    "TemplateLoadError",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "TemplateSyntaxError",
    "UnresolvedMacroError",
    "RenderContext",
    "Template",
    "TemplateSet",
]
