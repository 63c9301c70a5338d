"""
RenderContext: per-render state handed to every node.

``public``: variables supplied by the caller of ``Template.render()``.
``private``: render-scoped namespace that directives write into
(macros and imported macros are installed here).

Lookups check ``private`` first, then ``public``.

``calls`` is the stack of macro names currently executing.  It is shared
by a context and all of its children, because a macro callable is bound
to the context it was installed in, not to the one it is called from.
"""

from __future__ import annotations

from typing import Any, Optional

DEFAULT_MAX_DEPTH = 50


class RenderContext:

    def __init__(
        self,
        template,
        public: Optional[dict[str, Any]] = None,
        private: Optional[dict[str, Any]] = None,
        autoescape: bool = True,
        max_depth: int = DEFAULT_MAX_DEPTH,
        calls: Optional[list[str]] = None,
    ) -> None:
        self.template = template
        self.public: dict[str, Any] = public if public is not None else {}
        self.private: dict[str, Any] = private if private is not None else {}
        self.autoescape = autoescape
        self.max_depth = max_depth
        self.calls: list[str] = calls if calls is not None else []

    @property
    def depth(self) -> int:
        return len(self.calls)

    def lookup(self, name: str) -> Any:
        if name in self.private:
            return self.private[name]
        return self.public.get(name)

    def child(self) -> "RenderContext":
        """Nested context for a macro call: shared public vars and call stack, copied private namespace."""
        return RenderContext(
            self.template,
            public=self.public,
            private=dict(self.private),
            autoescape=self.autoescape,
            max_depth=self.max_depth,
            calls=self.calls,
        )

    def __repr__(self) -> str:
        name = getattr(self.template, "name", None)
        return f"<RenderContext template={name!r} depth={self.depth} private={sorted(self.private)}>"
