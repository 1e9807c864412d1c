"""Unit tests for loading option sets from YAML."""

import pytest

from princepdf.contexts.configuration import (
    InputTypeError,
    InvalidOptionError,
    RenderOptions,
    load_options,
    options_from_mapping,
)
from princepdf.contexts.rendering.command import build_option_args


@pytest.mark.unit
def test_load_options_from_yaml(tmp_path):
    """Test loading a complete preset file."""
    config = tmp_path / "prince.yaml"
    config.write_text(
        """
exe_path: /opt/prince/bin/prince
input_type: html
style_sheets:
  - print.css
  - fonts.css
pdf_author: Finance Team
compress: false
encryption:
  key_bits: 128
  user_password: user
  owner_password: owner
  disallow_print: true
"""
    )

    options = load_options(config)

    assert options.exe_path == "/opt/prince/bin/prince"
    assert options.input_type == "html"
    assert options.style_sheets == ("print.css", "fonts.css")
    assert options.pdf_author == "Finance Team"
    assert options.compress is False
    assert options.encrypt is True
    assert options.encryption.disallow_print is True


@pytest.mark.unit
def test_env_interpolation(tmp_path, monkeypatch):
    """Test that secrets can come from the environment."""
    monkeypatch.setenv("PRINCE_TEST_PASSWORD", "from-env")
    config = tmp_path / "prince.yaml"
    config.write_text("http_user: bot\nhttp_password: ${oc.env:PRINCE_TEST_PASSWORD}\n")

    options = load_options(config)

    assert options.http_password == "from-env"


@pytest.mark.unit
def test_empty_file(tmp_path):
    config = tmp_path / "empty.yaml"
    config.write_text("")
    assert load_options(config) == RenderOptions()


@pytest.mark.unit
def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_options(tmp_path / "missing.yaml")


@pytest.mark.unit
def test_base_options_are_extended(tmp_path):
    config = tmp_path / "prince.yaml"
    config.write_text("pdf_title: From File\n")
    base = RenderOptions().add_style_sheet("base.css")

    options = load_options(config, base=base)

    assert options.style_sheets == ("base.css",)
    assert options.pdf_title == "From File"


@pytest.mark.unit
def test_unknown_option():
    with pytest.raises(InvalidOptionError, match="Unknown option"):
        options_from_mapping({"paper_size": "A4"})


@pytest.mark.unit
def test_single_path_becomes_one_entry():
    """Test that a scalar style sheet is one path, not a list of characters."""
    options = options_from_mapping(
        {"style_sheets": "print.css", "scripts": "toc.js", "file_attachments": "data.csv"}
    )

    assert options.style_sheets == ("print.css",)
    assert options.scripts == ("toc.js",)
    assert options.file_attachments == ("data.csv",)
    assert build_option_args(options)[2:4] == ["-s", "print.css"]


@pytest.mark.unit
def test_single_path_from_yaml(tmp_path):
    config = tmp_path / "prince.yaml"
    config.write_text("style_sheets: print.css\n")

    assert load_options(config).style_sheets == ("print.css",)


@pytest.mark.unit
def test_path_list_rejects_other_types():
    with pytest.raises(InvalidOptionError, match="list of paths"):
        options_from_mapping({"style_sheets": 42})


@pytest.mark.unit
def test_invalid_input_type():
    with pytest.raises(InputTypeError):
        options_from_mapping({"input_type": "rtf"})


@pytest.mark.unit
def test_encryption_must_be_mapping():
    with pytest.raises(InvalidOptionError, match="mapping"):
        options_from_mapping({"encryption": "yes please"})


@pytest.mark.unit
def test_encryption_bad_parameters():
    with pytest.raises(InvalidOptionError, match="Invalid encryption parameters"):
        options_from_mapping({"encryption": {"key_bits": 128}})


@pytest.mark.unit
def test_encryption_null_disables():
    base = RenderOptions().with_encryption(40, "u", "o")
    options = options_from_mapping({"encryption": None}, base=base)
    assert options.encrypt is False
