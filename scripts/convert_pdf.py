#!/usr/bin/env python3
"""
Prince PDF Conversion CLI

Converts HTML/XML documents to PDF with Prince and reports Prince's
status messages.

Commands:
    convert - Convert one or more documents (or stdin) to PDF
    command - Print the Prince command line without running it

Examples:\n

    convert_pdf.py convert report.html -o report.pdf                  # Single document

    convert_pdf.py convert ch1.html ch2.html -o book.pdf -s print.css # Several documents

    convert_pdf.py convert - -o out.pdf --input-type html < page.html # Markup on stdin

    convert_pdf.py convert report.html --config prince.yaml           # Options from YAML

    convert_pdf.py command report.html -o report.pdf --title "Q3"     # Dry run
"""

import os
import sys
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from princepdf.contexts.configuration import (
    InvalidOptionError,
    RenderOptions,
    load_options,
    options_from_mapping,
)
from princepdf.contexts.rendering import (
    PrinceExecutionError,
    Severity,
    build_command,
    convert_multiple_files,
    convert_multiple_files_to_stream,
    convert_string_to_file,
    convert_string_to_stream,
    format_command_line,
)
from princepdf.contexts.rendering.logger import setup_rendering_logger
from princepdf.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH") or "outs/logs")

SEVERITY_COLORS = {
    Severity.ERROR: typer.colors.RED,
    Severity.WARNING: typer.colors.YELLOW,
    Severity.INFO: None,
}

app = typer.Typer(
    help="Convert HTML/XML documents to PDF with Prince",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def resolve_options(
    config: Optional[Path],
    style: List[str],
    script: List[str],
    attach: List[str],
    input_type: Optional[str],
    base_url: Optional[str],
    title: Optional[str],
    subject: Optional[str],
    author: Optional[str],
    keywords: Optional[str],
    javascript: bool,
    no_compress: bool,
) -> RenderOptions:
    """Build the option set: YAML file first, then command-line flags on top."""
    options = load_options(config) if config else RenderOptions()

    overrides = {}
    if input_type:
        overrides["input_type"] = input_type
    if base_url:
        overrides["base_url"] = base_url
    if javascript:
        overrides["javascript"] = True
    if no_compress:
        overrides["compress"] = False
    options = options_from_mapping(overrides, base=options)

    for css_path in style:
        options = options.add_style_sheet(css_path)
    for js_path in script:
        options = options.add_script(js_path)
    for file_path in attach:
        options = options.add_file_attachment(file_path)

    return options.with_pdf_metadata(
        title=title, subject=subject, author=author, keywords=keywords
    )


# Shared option declarations
InputsArg = Annotated[
    List[str], typer.Argument(help="Input documents ('-' reads markup from stdin)")
]
OutputOpt = Annotated[
    Optional[str],
    typer.Option("--output", "-o", help="Output PDF ('-' writes to stdout)"),
]
ConfigOpt = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="YAML file with Prince options", exists=True),
]
StyleOpt = Annotated[List[str], typer.Option("--style", "-s", help="CSS style sheet")]
ScriptOpt = Annotated[List[str], typer.Option("--script", help="JavaScript file")]
AttachOpt = Annotated[List[str], typer.Option("--attach", help="File to attach to the PDF")]
InputTypeOpt = Annotated[
    Optional[str], typer.Option("--input-type", "-i", help="auto, html or xml")
]
BaseUrlOpt = Annotated[Optional[str], typer.Option("--baseurl", help="Base URL of the input")]
TitleOpt = Annotated[Optional[str], typer.Option("--title", help="PDF title")]
SubjectOpt = Annotated[Optional[str], typer.Option("--subject", help="PDF subject")]
AuthorOpt = Annotated[Optional[str], typer.Option("--author", help="PDF author")]
KeywordsOpt = Annotated[Optional[str], typer.Option("--keywords", help="PDF keywords")]
JavascriptOpt = Annotated[
    bool, typer.Option("--javascript", help="Run JavaScript found in the documents")
]
NoCompressOpt = Annotated[bool, typer.Option("--no-compress", help="Disable PDF compression")]


@app.command("convert")
def convert_command(
    inputs: InputsArg,
    output: OutputOpt = None,
    config: ConfigOpt = None,
    style: StyleOpt = [],
    script: ScriptOpt = [],
    attach: AttachOpt = [],
    input_type: InputTypeOpt = None,
    base_url: BaseUrlOpt = None,
    title: TitleOpt = None,
    subject: SubjectOpt = None,
    author: AuthorOpt = None,
    keywords: KeywordsOpt = None,
    javascript: JavascriptOpt = False,
    no_compress: NoCompressOpt = False,
    timeout: Annotated[
        Optional[float], typer.Option("--timeout", help="Kill Prince after this many seconds")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show every Prince message")
    ] = False,
):
    """
    Convert documents to PDF.

    Examples:\n

        $ convert_pdf.py convert report.html -o report.pdf

        $ convert_pdf.py convert - -o - -i html < page.html > page.pdf
    """
    try:
        options = resolve_options(
            config, style, script, attach, input_type, base_url,
            title, subject, author, keywords, javascript, no_compress,
        )
    except InvalidOptionError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    log_dir = LOGS_PATH / f"render_{now()}"
    setup_rendering_logger(log_dir, exe_path=options.exe_path)

    from_stdin = inputs == ["-"]
    to_stdout = output == "-"

    try:
        if from_stdin:
            markup = sys.stdin.buffer.read()
            if to_stdout:
                result = convert_string_to_stream(
                    markup, sys.stdout.buffer, options, timeout=timeout, verbose=verbose
                )
            elif output:
                result = convert_string_to_file(
                    markup, output, options, timeout=timeout, verbose=verbose
                )
            else:
                typer.secho("Error: --output is required with stdin input", fg=typer.colors.RED, err=True)
                raise typer.Exit(code=2)
        elif to_stdout:
            result = convert_multiple_files_to_stream(
                inputs, sys.stdout.buffer, options, timeout=timeout, verbose=verbose
            )
        else:
            result = convert_multiple_files(
                inputs, output, options, timeout=timeout, verbose=verbose
            )
    except PrinceExecutionError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    # Results go to stderr, stdout may hold the PDF
    typer.echo("", err=True)
    for message in result.messages:
        if message.severity is Severity.INFO and not verbose:
            continue
        color = SEVERITY_COLORS[message.severity]
        typer.secho(f"  [{message.severity.value}] {message}", fg=color, err=True)

    if result.success:
        typer.secho("✓ Conversion succeeded", fg=typer.colors.GREEN, bold=True, err=True)
        if result.pdf_path:
            pages = f" ({result.page_count} pages)" if result.page_count else ""
            typer.echo(f"  PDF: {result.pdf_path}{pages}", err=True)
    elif result.timed_out:
        typer.secho("✗ Prince timed out", fg=typer.colors.RED, bold=True, err=True)
    elif not result.finished:
        typer.secho(
            f"✗ Prince exited without a result (exit code {result.returncode})",
            fg=typer.colors.RED, bold=True, err=True,
        )
    else:
        typer.secho(
            f"✗ Conversion failed with {len(result.errors)} errors",
            fg=typer.colors.RED, bold=True, err=True,
        )

    typer.echo(f"  Log: {log_dir / 'render.log'}", err=True)
    raise typer.Exit(code=0 if result.success else 1)


@app.command("command")
def command_command(
    inputs: InputsArg,
    output: OutputOpt = None,
    config: ConfigOpt = None,
    style: StyleOpt = [],
    script: ScriptOpt = [],
    attach: AttachOpt = [],
    input_type: InputTypeOpt = None,
    base_url: BaseUrlOpt = None,
    title: TitleOpt = None,
    subject: SubjectOpt = None,
    author: AuthorOpt = None,
    keywords: KeywordsOpt = None,
    javascript: JavascriptOpt = False,
    no_compress: NoCompressOpt = False,
):
    """
    Print the Prince command line that `convert` would run.

    Examples:\n

        $ convert_pdf.py command report.html -o "My Report.pdf" --title 'Say "hi"'
    """
    try:
        options = resolve_options(
            config, style, script, attach, input_type, base_url,
            title, subject, author, keywords, javascript, no_compress,
        )
    except InvalidOptionError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    typer.echo(format_command_line(build_command(options, inputs, output)))


if __name__ == "__main__":
    app()
