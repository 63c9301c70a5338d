"""
TemplateSet
===========
Owns filename resolution, loading and compilation of template files, and
caches compiled templates per canonical filename.

Usage::

    tset = TemplateSet("site", base_dir="templates")
    html = tset.render_file("page.html", {"user": "alice"})

Relative filenames are resolved against the directory of the template
that references them; templates created from strings (and top-level
lookups) resolve against ``base_dir``.
"""

from __future__ import annotations

import io
import logging
import os
import threading
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from macrotpl.core.config import get_settings
from macrotpl.core.errors import TemplateLoadError, TemplateNotFoundError
from .context import RenderContext
from .directives import DirectiveRegistry, MacroDefinition, default_registry
from .lexer import tokenize
from .nodes import Node, execute_nodes
from .parser import Parser

logger = logging.getLogger(__name__)

STRING_TEMPLATE_NAME = "<string>"


# -----------------------------------------------------------------------------

class Template:
    """
    A compiled template.  ``macros`` and ``exported_macros`` are filled in
    while the source is parsed and are read-only views afterwards.
    """

    def __init__(self, template_set: "TemplateSet", source: str, name: Optional[str] = None) -> None:
        self.template_set = template_set
        self.name = name or STRING_TEMPLATE_NAME
        self.is_string = name is None
        self.source = source
        self._macros: dict[str, MacroDefinition] = {}
        self._exported_macros: dict[str, MacroDefinition] = {}

        tokens = tokenize(source, self.name)
        parser = Parser(tokens, template=self, registry=template_set.registry)
        self.nodes: list[Node] = parser.parse_document()

    # ------------------------------------------------------------------ macros

    @property
    def macros(self) -> Mapping[str, MacroDefinition]:
        return MappingProxyType(self._macros)

    @property
    def exported_macros(self) -> Mapping[str, MacroDefinition]:
        return MappingProxyType(self._exported_macros)

    def add_macro(self, macro: MacroDefinition) -> None:
        self._macros[macro.name] = macro
        if macro.exported:
            self._exported_macros[macro.name] = macro

    # ------------------------------------------------------------------ render

    def new_context(self, context: Optional[dict[str, Any]] = None) -> RenderContext:
        return RenderContext(
            self,
            public=dict(context or {}),
            autoescape=self.template_set.autoescape,
            max_depth=self.template_set.max_macro_depth,
        )

    def execute(self, ctx: RenderContext, out: io.StringIO) -> None:
        execute_nodes(self.nodes, ctx, out)

    def render(self, context: Optional[dict[str, Any]] = None) -> str:
        out = io.StringIO()
        self.execute(self.new_context(context), out)
        return out.getvalue()

    def __repr__(self) -> str:
        return f"<Template {self.name!r} macros={sorted(self._macros)}>"


# -----------------------------------------------------------------------------

class TemplateSet:

    def __init__(
        self,
        name: str = "default",
        base_dir: str | Path | None = None,
        autoescape: Optional[bool] = None,
        cache: Optional[bool] = None,
        max_macro_depth: Optional[int] = None,
        registry: Optional[DirectiveRegistry] = None,
    ) -> None:
        settings = get_settings()
        self.name = name
        self.base_dir = Path(base_dir if base_dir is not None else settings.template_dir).expanduser().resolve()
        self.autoescape = settings.autoescape if autoescape is None else autoescape
        self.cache_enabled = settings.cache_templates if cache is None else cache
        self.max_macro_depth = settings.max_macro_depth if max_macro_depth is None else max_macro_depth
        self.registry = registry if registry is not None else default_registry()

        self._cache: dict[str, Template] = {}
        self._loading: set[str] = set()
        self._lock = threading.RLock()

    # ------------------------------------------------------------- resolution

    def resolve_filename(self, template: Optional[Template], path: str) -> str:
        """Return the canonical absolute filename of *path* as seen from *template*."""
        if os.path.isabs(path):
            return os.path.normpath(path)
        if template is None or template.is_string:
            base = str(self.base_dir)
        else:
            base = os.path.dirname(template.name)
        return os.path.normpath(os.path.join(base, path))

    def is_inside_base_dir(self, filename: str) -> bool:
        base = str(self.base_dir)
        real = os.path.realpath(filename)
        return os.path.commonpath([base, real]) == base

    # ---------------------------------------------------------------- loading

    def from_file(self, filename: str) -> Template:
        """
        Load and compile *filename* (cached per canonical filename).

        Only files below ``base_dir`` can be loaded; symlinks are followed
        before the check, so a link pointing out of the directory is refused.
        """
        filename = self.resolve_filename(None, filename)
        if not self.is_inside_base_dir(filename):
            raise TemplateLoadError(
                f"Template '{filename}' is outside the template directory.",
                sender="fromfile",
            )

        with self._lock:
            cached = self._cache.get(filename)
            if cached is not None:
                logger.debug("Template cache hit: %s", filename)
                return cached

            if filename in self._loading:
                raise TemplateLoadError(
                    f"Template '{filename}' is already being compiled (circular import).",
                    sender="fromfile",
                )

            try:
                source = Path(filename).read_text(encoding="utf-8")
            except FileNotFoundError:
                raise TemplateNotFoundError(f"Template '{filename}' not found.", sender="fromfile") from None
            except (OSError, UnicodeDecodeError) as exc:
                raise TemplateLoadError(f"Template '{filename}' cannot be read: {exc}", sender="fromfile") from exc

            self._loading.add(filename)
            try:
                template = Template(self, source, filename)
            finally:
                self._loading.discard(filename)

            logger.debug("Compiled template %s (%d macro(s))", filename, len(template.macros))
            if self.cache_enabled:
                self._cache[filename] = template
            return template

    def from_string(self, source: str) -> Template:
        with self._lock:
            return Template(self, source)

    def render_file(self, filename: str, context: Optional[dict[str, Any]] = None) -> str:
        return self.from_file(filename).render(context)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def __repr__(self) -> str:
        return f"<TemplateSet {self.name!r} base_dir={str(self.base_dir)!r}>"


# -----------------------------------------------------------------------------

@lru_cache
def get_template_set() -> TemplateSet:
    """Process-wide template set built from settings."""
    settings = get_settings()
    return TemplateSet(settings.app_name, base_dir=settings.template_dir_resolved)
