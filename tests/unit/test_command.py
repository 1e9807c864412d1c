"""Unit tests for Prince command assembly."""

import sys

import pytest

from princepdf.contexts.configuration import RenderOptions
from princepdf.contexts.rendering.command import (
    build_command,
    build_option_args,
    format_command_line,
    mask_secrets,
    process_args,
    quote_token,
)
from princepdf.utils.escaping import unescape_argument

EXE = "/usr/local/bin/prince"


@pytest.fixture
def options():
    return RenderOptions(exe_path=EXE)


class TestBuildOptionArgs:
    """Tests for translating option sets into arguments."""

    @pytest.mark.unit
    def test_defaults_only_server(self, options):
        assert build_option_args(options) == [EXE, "--server"]

    @pytest.mark.unit
    def test_auto_input_type_not_emitted(self, options):
        assert "-i" not in build_option_args(options.with_input_type("auto"))

    @pytest.mark.unit
    def test_explicit_input_type_emitted(self, options):
        args = build_option_args(options.with_input_type("xml"))
        assert args[args.index("-i") + 1] == "xml"

    @pytest.mark.unit
    def test_repeated_options_keep_order(self, options):
        options = (
            options.add_style_sheet("a.css")
            .add_style_sheet("b.css")
            .add_script("x.js")
            .add_file_attachment("data.csv")
        )
        assert build_option_args(options)[2:] == [
            "-s", "a.css",
            "-s", "b.css",
            "--script", "x.js",
            "--attach=data.csv",
        ]

    @pytest.mark.unit
    def test_boolean_flags(self, options):
        options = options.with_options(
            javascript=True,
            xinclude=False,
            insecure=True,
            embed_fonts=False,
            subset_fonts=False,
            artificial_fonts=False,
            compress=False,
        )
        args = build_option_args(options)
        for flag in [
            "--javascript",
            "--no-xinclude",
            "--insecure",
            "--no-embed-fonts",
            "--no-subset-fonts",
            "--no-artificial-fonts",
            "--no-compress",
        ]:
            assert flag in args

    @pytest.mark.unit
    def test_string_options(self, options):
        options = options.with_options(
            base_url="http://example.com/",
            http_user="alice",
            http_password="secret",
            http_proxy="http://proxy:3128",
            log_file="prince.log",
            file_root="/srv/www",
            license_file="license.dat",
            license_key="ABC123",
        )
        args = build_option_args(options)
        assert "--baseurl=http://example.com/" in args
        assert "--http-user=alice" in args
        assert "--http-password=secret" in args
        assert "--http-proxy=http://proxy:3128" in args
        assert "--log=prince.log" in args
        assert "--fileroot=/srv/www" in args
        assert "--license-file=license.dat" in args
        assert "--license-key=ABC123" in args

    @pytest.mark.unit
    def test_pdf_metadata(self, options):
        options = options.with_pdf_metadata(
            title="T", subject="S", author="A", keywords="K", creator="C"
        )
        assert build_option_args(options)[2:] == [
            "--pdf-title=T",
            "--pdf-subject=S",
            "--pdf-author=A",
            "--pdf-keywords=K",
            "--pdf-creator=C",
        ]

    @pytest.mark.unit
    def test_encryption(self, options):
        options = options.with_encryption(128, "u", "o", disallow_print=True, disallow_annotate=True)
        assert build_option_args(options)[2:] == [
            "--encrypt",
            "--key-bits", "128",
            "--user-password=u",
            "--owner-password=o",
            "--disallow-print",
            "--disallow-annotate",
        ]

    @pytest.mark.unit
    def test_encrypt_without_parameters(self, options):
        assert build_option_args(options.with_options(encrypt=True))[2:] == ["--encrypt"]


class TestBuildCommand:
    """Tests for inputs and outputs."""

    @pytest.mark.unit
    def test_file_to_file(self, options):
        assert build_command(options, ["in.html"], "out.pdf") == [
            EXE, "--server", "in.html", "-o", "out.pdf",
        ]

    @pytest.mark.unit
    def test_no_output(self, options):
        assert build_command(options, ["in.html"]) == [EXE, "--server", "in.html"]

    @pytest.mark.unit
    def test_blank_output_ignored(self, options):
        assert build_command(options, ["in.html"], "  ") == [EXE, "--server", "in.html"]

    @pytest.mark.unit
    def test_multiple_inputs(self, options):
        assert build_command(options, ["a.html", "b.html"], "book.pdf")[2:] == [
            "a.html", "b.html", "-o", "book.pdf",
        ]

    @pytest.mark.unit
    def test_stream_output_is_silent(self, options):
        assert build_command(options, ["-"], "-") == [EXE, "--server", "--silent", "-", "-o", "-"]

    @pytest.mark.unit
    def test_requires_input(self, options):
        with pytest.raises(ValueError):
            build_command(options, [])


class TestFormatCommandLine:
    """Tests for the single-string command line."""

    @pytest.mark.unit
    def test_flags_bare_values_quoted(self, options):
        args = build_command(options.with_input_type("html"), ["in.html"], "out.pdf")
        assert format_command_line(args) == f'{EXE} --server -i "html" "in.html" -o "out.pdf"'

    @pytest.mark.unit
    def test_executable_with_spaces(self):
        args = [r"C:\Program Files\Prince\engine\bin\prince.exe", "--server"]
        assert format_command_line(args) == r'C:\Program" "Files\Prince\engine\bin\prince.exe --server'

    @pytest.mark.unit
    def test_key_value_escaped(self):
        assert quote_token('--pdf-title=Say "hi"') == r'--pdf-title="Say \"hi\""'

    @pytest.mark.unit
    def test_trailing_backslash_value(self):
        assert quote_token("--fileroot=C:\\www\\") == '--fileroot="C:\\www\\\\"'

    @pytest.mark.unit
    def test_stdio_dash_bare(self):
        assert quote_token("-") == "-"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "password",
        ['plain', 'with "quotes"', 'ends with \\', '\\"mixed\\\\"', 'semi;colon & (parens)'],
    )
    def test_values_round_trip(self, options, password):
        """Prince's argument splitter recovers every value exactly."""
        args = build_command(options.with_http_auth("user", password), ["in.html"])
        token = next(t for t in args if t.startswith("--http-password="))
        quoted = quote_token(token)[len("--http-password="):]
        assert unescape_argument(quoted) == password

    @pytest.mark.unit
    def test_empty(self):
        assert format_command_line([]) == ""


@pytest.mark.unit
def test_process_args_platform(options):
    args = build_command(options, ["in.html"], "out.pdf")
    if sys.platform == "win32":
        assert process_args(args) == format_command_line(args)
    else:
        assert process_args(args) == args


@pytest.mark.unit
def test_mask_secrets(options):
    options = (
        options.with_options(license_key="LK-1")
        .with_http_auth("user", "pw")
        .with_encryption(40, user_password="u", owner_password="o")
    )
    args = mask_secrets(build_command(options, ["in.html"]))

    assert "--http-user=user" in args
    assert "--http-password=***" in args
    assert "--license-key=***" in args
    assert "--user-password=***" in args
    assert "--owner-password=***" in args
    assert args[-1] == "in.html"
