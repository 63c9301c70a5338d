#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
TemplateSet Tests
=================
  - Filename resolution (absolute, base-relative, template-relative)
  - Compilation cache on/off
  - Load errors, confinement to base_dir
  - Settings-driven defaults
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import os

import pytest

from macrotpl.core.config import Settings, get_settings
from macrotpl.core.errors import TemplateError, TemplateLoadError, TemplateNotFoundError
from macrotpl.services.template_set import TemplateSet


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 1. Resolution
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestResolveFilename:
    def test_relative_to_base_dir(self, tset):
        assert tset.resolve_filename(None, "a.html") == str(tset.base_dir / "a.html")

    def test_absolute_is_normalised(self, tset):
        path = os.path.join(str(tset.base_dir), "x", "..", "a.html")
        assert tset.resolve_filename(None, path) == str(tset.base_dir / "a.html")

    def test_string_template_uses_base_dir(self, tset):
        tpl = tset.from_string("")
        assert tset.resolve_filename(tpl, "sub/a.html") == str(tset.base_dir / "sub" / "a.html")

    def test_relative_to_requesting_template(self, tset, write):
        write("sub/page.html", "")
        page = tset.from_file("sub/page.html")
        assert tset.resolve_filename(page, "lib.html") == str(tset.base_dir / "sub" / "lib.html")
        assert tset.resolve_filename(page, "../lib.html") == str(tset.base_dir / "lib.html")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 2. Loading and caching
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestLoading:
    def test_from_file_names_template_canonically(self, tset):
        forms = tset.from_file("forms.html")
        assert forms.name == str(tset.base_dir / "forms.html")
        assert not forms.is_string

    def test_from_string_name(self, tset):
        tpl = tset.from_string("x")
        assert tpl.name == "<string>"
        assert tpl.is_string

    def test_cache_returns_same_template(self, tset):
        assert tset.from_file("forms.html") is tset.from_file(str(tset.base_dir / "forms.html"))

    def test_clear_cache(self, tset):
        first = tset.from_file("forms.html")
        tset.clear_cache()
        assert tset.from_file("forms.html") is not first

    def test_cache_disabled(self, template_dir):
        tset = TemplateSet("nocache", base_dir=template_dir, cache=False)
        assert tset.from_file("forms.html") is not tset.from_file("forms.html")

    def test_changes_picked_up_without_cache(self, template_dir, write):
        tset = TemplateSet("nocache", base_dir=template_dir, cache=False)
        write("v.html", "one")
        assert tset.render_file("v.html") == "one"
        write("v.html", "two")
        assert tset.render_file("v.html") == "two"

    def test_not_found(self, tset):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            tset.from_file("nope.html")
        assert isinstance(exc_info.value, TemplateLoadError)
        assert not exc_info.value.has_position

    def test_directory_is_load_error(self, tset, write):
        write("dir/inner.html", "")
        with pytest.raises(TemplateLoadError, match="cannot be read"):
            tset.from_file("dir")

    def test_outside_base_dir_refused(self, tset, template_dir):
        (template_dir.parent / "secret.html").write_text("secret", encoding="utf-8")
        for path in ("../secret.html", str(template_dir.parent / "secret.html")):
            with pytest.raises(TemplateLoadError, match="outside the template directory") as exc_info:
                tset.from_file(path)
            assert not isinstance(exc_info.value, TemplateNotFoundError)

    def test_missing_file_outside_base_dir_not_reported_as_missing(self, tset):
        with pytest.raises(TemplateLoadError, match="outside the template directory"):
            tset.from_file("/nope/none.html")

    def test_symlink_out_of_base_dir_refused(self, tset, template_dir):
        (template_dir.parent / "secret.html").write_text("secret", encoding="utf-8")
        (template_dir / "link.html").symlink_to(template_dir.parent / "secret.html")
        with pytest.raises(TemplateLoadError, match="outside the template directory"):
            tset.from_file("link.html")

    def test_import_outside_base_dir_positioned_at_directive(self, tset, write):
        write("page.html", '\n{% import "../../x.html" a %}')
        with pytest.raises(TemplateLoadError, match="outside the template directory") as exc_info:
            tset.from_file("page.html")
        assert (exc_info.value.line, exc_info.value.column) == (2, 4)

    def test_failed_compile_not_cached(self, tset, write):
        write("bad.html", "{% bogus %}")
        with pytest.raises(TemplateError):
            tset.from_file("bad.html")
        write("bad.html", "fixed")
        assert tset.render_file("bad.html") == "fixed"

    def test_render_file(self, tset, write):
        write("page.html", '{% import "forms.html" button %}{{ button(label) }}')
        assert tset.render_file("page.html", {"label": "<ok>"}) == "<button>&lt;ok&gt;</button>"

    def test_error_str_contains_position(self, tset):
        with pytest.raises(TemplateError) as exc_info:
            tset.from_string("\n{% bogus %}")
        text = str(exc_info.value)
        assert "Line 2" in text
        assert "bogus" in text


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 3. Settings
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestSettings:
    def test_testing_environment(self):
        assert get_settings().is_testing

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TEMPLATE_DIR", str(tmp_path))
        monkeypatch.setenv("AUTOESCAPE", "false")
        settings = Settings()
        assert settings.template_dir_resolved == tmp_path.resolve()
        assert settings.autoescape is False

    def test_defaults_from_settings(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TEMPLATE_DIR", str(tmp_path))
        monkeypatch.setenv("CACHE_TEMPLATES", "false")
        monkeypatch.setenv("MAX_MACRO_DEPTH", "7")
        get_settings.cache_clear()
        try:
            tset = TemplateSet()
            assert tset.base_dir == tmp_path.resolve()
            assert tset.cache_enabled is False
            assert tset.max_macro_depth == 7
            assert tset.from_string("").new_context().max_depth == 7
        finally:
            get_settings.cache_clear()


# -----------------------------------------------------------------------------
