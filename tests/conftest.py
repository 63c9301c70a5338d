#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Test fixtures
=============
Each test gets its own temporary template directory and a TemplateSet over
it.  The HTTP client's get_template_set dependency is overridden to that
same set, so API tests see the files the test wrote.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from httpx import ASGITransport, AsyncClient

# ── Env vars must be set before importing app modules ────────────────────────
os.environ.setdefault("ENVIRONMENT",  "testing")
os.environ.setdefault("TEMPLATE_DIR", tempfile.mkdtemp())

from macrotpl.main import create_app
from macrotpl.services.template_set import TemplateSet, get_template_set


# ── Shared macro library used by most import tests ───────────────────────────
FORMS_HTML = (
    '{% macro field(name, type="text") export %}'
    '<input name="{{ name }}" type="{{ type }}">'
    '{% endmacro %}\n'
    '{% macro button(label) export %}<button>{{ label }}</button>{% endmacro %}\n'
    '{% macro helper(x) %}[{{ x }}]{% endmacro %}\n'
    '{% macro greet() export %}Hello {{ user }}{% endmacro %}\n'
)


# ── Template directory + writer ──────────────────────────────────────────────
@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    d = tmp_path / "templates"
    d.mkdir()
    (d / "forms.html").write_text(FORMS_HTML, encoding="utf-8")
    return d


@pytest.fixture
def write(template_dir: Path):
    """write(name, source) → absolute path of the new template file."""
    def _write(name: str, source: str) -> Path:
        path = template_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path
    return _write


# ── One TemplateSet per test ─────────────────────────────────────────────────
@pytest.fixture
def tset(template_dir: Path) -> TemplateSet:
    return TemplateSet("test", base_dir=template_dir, autoescape=True, cache=True)


# ── HTTP client whose get_template_set returns the test's set ────────────────
@pytest_asyncio.fixture
async def client(tset: TemplateSet) -> AsyncGenerator[AsyncClient, None]:
    app = create_app()
    app.dependency_overrides[get_template_set] = lambda: tset

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c


# -----------------------------------------------------------------------------
