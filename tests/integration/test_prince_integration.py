"""
Integration tests against a real Prince installation.
"""

import io
import shutil

import pytest

from princepdf.contexts.configuration import RenderOptions
from princepdf.contexts.rendering import (
    RunVerdict,
    convert_file_to_file,
    convert_string_to_stream,
)

PRINCE = shutil.which("prince")
skip_if_no_prince = pytest.mark.skipif(
    PRINCE is None, reason="prince not installed - see https://www.princexml.com/download/"
)


@pytest.fixture
def options():
    return RenderOptions(exe_path=PRINCE or "prince")


@pytest.mark.integration
@pytest.mark.prince
@skip_if_no_prince
def test_convert_html_file(options, tmp_path):
    """Test converting a simple HTML document."""
    source = tmp_path / "simple.html"
    source.write_text("<html><body><h1>Hello</h1><p>World</p></body></html>")
    pdf = tmp_path / "simple.pdf"

    result = convert_file_to_file(source, pdf, options=options.with_pdf_metadata(title='A "quoted" title'))

    assert result.success, f"Conversion failed with errors: {result.errors}"
    assert result.pdf_path == pdf
    assert pdf.stat().st_size > 0
    assert result.page_count == 1


@pytest.mark.integration
@pytest.mark.prince
@skip_if_no_prince
def test_convert_string_to_stream(options):
    output = io.BytesIO()

    result = convert_string_to_stream(
        "<p>streamed</p>", output, options=options.with_input_type("html")
    )

    assert result.success
    assert output.getvalue().startswith(b"%PDF")


@pytest.mark.integration
@pytest.mark.prince
@skip_if_no_prince
def test_missing_input_reports_failure(options, tmp_path):
    result = convert_file_to_file(tmp_path / "missing.html", tmp_path / "out.pdf", options=options)

    assert result.verdict is RunVerdict.FAILURE
    assert result.errors
