"""Unit tests for file transforms (docsmith.template.transform).

Tests cover:
- render_context exposure of model fields
- Html/Text/Copy transform output
- FileDescriptor destination mirroring and error wrapping
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from jinja2 import Environment

from docsmith.model import Document, Workspace, text
from docsmith.template.transform import (
    CopyTransform,
    FileDescriptor,
    HtmlTransform,
    TemplateRenderError,
    TextTransform,
    render_context,
)


class TestRenderContext:
    @pytest.mark.unit
    def test_node_fields_at_top_level(self):
        doc = Document(id="d", title="Book")
        context = render_context(doc)
        assert context["title"] == "Book"
        assert context["id"] == "d"
        assert context["kind"] == "document"
        assert context["model"] is doc

    @pytest.mark.unit
    def test_dict_model(self):
        context = render_context({"title": "x"})
        assert context["title"] == "x"
        assert context["model"] == {"title": "x"}

    @pytest.mark.unit
    def test_other_values_only_as_model(self):
        assert render_context(7) == {"model": 7}


class TestJinjaTransforms:
    @pytest.mark.unit
    def test_text_transform_renders_verbatim(self, tmp_path: Path):
        template = Environment(autoescape=False).from_string("<b>{{ title }}</b>")
        out = io.BytesIO()
        TextTransform(name="a.tmpl", template=template, source=tmp_path / "a.tmpl").transform(
            Workspace(title="R&D"), out
        )
        assert out.getvalue() == b"<b>R&D</b>"

    @pytest.mark.unit
    def test_html_transform_escapes(self, tmp_path: Path):
        template = Environment(autoescape=True).from_string("<b>{{ title }}</b>")
        out = io.BytesIO()
        HtmlTransform(name="a.gohtml", template=template, source=tmp_path / "a.gohtml").transform(
            Workspace(title="R&D"), out
        )
        assert out.getvalue() == b"<b>R&amp;D</b>"

    @pytest.mark.unit
    def test_render_failure_names_file(self, tmp_path: Path):
        template = Environment().from_string("{{ model.title.missing() }}")
        source = tmp_path / "broken.tmpl"
        with pytest.raises(TemplateRenderError, match="broken.tmpl") as excinfo:
            TextTransform(name="broken.tmpl", template=template, source=source).transform(
                Workspace(title="x"), io.BytesIO()
            )
        assert excinfo.value.path == source

    @pytest.mark.unit
    def test_output_is_utf8(self, tmp_path: Path):
        template = Environment().from_string("{{ model | string }}")
        out = io.BytesIO()
        TextTransform(name="u.tmpl", template=template, source=tmp_path / "u.tmpl").transform(text("ß"), out)
        assert out.getvalue().decode("utf-8") == "ß"


class TestCopyTransform:
    @pytest.mark.unit
    def test_bytes_identical(self, tmp_path: Path):
        source = tmp_path / "logo.png"
        payload = bytes(range(256)) * 4
        source.write_bytes(payload)
        out = io.BytesIO()
        CopyTransform(source=source).transform(None, out)
        assert out.getvalue() == payload

    @pytest.mark.unit
    def test_missing_source_raises(self, tmp_path: Path):
        with pytest.raises(TemplateRenderError, match="Failed to copy"):
            CopyTransform(source=tmp_path / "gone.bin").transform(None, io.BytesIO())


class TestFileDescriptor:
    @pytest.mark.unit
    def test_apply_mirrors_relative_directory(self, tmp_path: Path):
        source = tmp_path / "src" / "img" / "a.bin"
        source.parent.mkdir(parents=True)
        source.write_bytes(b"abc")
        staging = tmp_path / "stage"

        descriptor = FileDescriptor(
            source=source,
            relative_dir=Path("img"),
            destination_name="a.bin",
            transform=CopyTransform(source=source),
        )
        written = descriptor.apply(None, staging)

        assert written == staging / "img" / "a.bin"
        assert written.read_bytes() == b"abc"

    @pytest.mark.unit
    def test_apply_truncates_previous_content(self, tmp_path: Path):
        source = tmp_path / "short.txt"
        source.write_bytes(b"new")
        staging = tmp_path / "stage"
        staging.mkdir()
        (staging / "short.txt").write_bytes(b"much longer old content")

        FileDescriptor(
            source=source, relative_dir=Path("."), destination_name="short.txt",
            transform=CopyTransform(source=source),
        ).apply(None, staging)

        assert (staging / "short.txt").read_bytes() == b"new"
