"""
Prince command assembly.

build_command() produces the ordered argument list for one Prince run.
format_command_line() renders that list as a single command-line string,
quoting the executable path with add_double_quotes() and every value with
escape_argument(). The list is what gets executed on POSIX; the string is
what gets executed on Windows (CreateProcess, no shell) and what appears in
logs and error messages everywhere.
"""

import re
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Union

from princepdf.contexts.configuration.options import DEFAULT_INPUT_TYPE, RenderOptions
from princepdf.utils.escaping import add_double_quotes, escape_argument

PathLike = Union[str, Path]

STDIO = "-"

# Tokens written without quotes: flags ("--silent", "-o") and "-" for stdio
_BARE_FLAG = re.compile(r"^-[-A-Za-z0-9]*$")
# "--name=value" tokens: only the value part gets quoted
_KEY_VALUE = re.compile(r"^(--[A-Za-z0-9][-A-Za-z0-9]*=)(.*)$", re.DOTALL)


def build_option_args(options: RenderOptions) -> List[str]:
    """
    Translate an option set into Prince arguments, executable first.

    Returns:
        [exe_path, "--server", ...options]
    """
    args = [options.exe_path, "--server"]

    for css_path in options.style_sheets:
        args += ["-s", css_path]
    for js_path in options.scripts:
        args += ["--script", js_path]
    for file_path in options.file_attachments:
        args.append(f"--attach={file_path}")

    if options.input_type != DEFAULT_INPUT_TYPE:
        args += ["-i", options.input_type]

    if options.javascript:
        args.append("--javascript")
    if options.base_url:
        args.append(f"--baseurl={options.base_url}")
    if not options.xinclude:
        args.append("--no-xinclude")
    if options.http_user:
        args.append(f"--http-user={options.http_user}")
    if options.http_password:
        args.append(f"--http-password={options.http_password}")
    if options.http_proxy:
        args.append(f"--http-proxy={options.http_proxy}")
    if options.insecure:
        args.append("--insecure")
    if options.log_file:
        args.append(f"--log={options.log_file}")
    if options.file_root:
        args.append(f"--fileroot={options.file_root}")
    if options.license_file:
        args.append(f"--license-file={options.license_file}")
    if options.license_key:
        args.append(f"--license-key={options.license_key}")

    if not options.embed_fonts:
        args.append("--no-embed-fonts")
    if not options.subset_fonts:
        args.append("--no-subset-fonts")
    if not options.artificial_fonts:
        args.append("--no-artificial-fonts")
    if not options.compress:
        args.append("--no-compress")

    if options.pdf_title:
        args.append(f"--pdf-title={options.pdf_title}")
    if options.pdf_subject:
        args.append(f"--pdf-subject={options.pdf_subject}")
    if options.pdf_author:
        args.append(f"--pdf-author={options.pdf_author}")
    if options.pdf_keywords:
        args.append(f"--pdf-keywords={options.pdf_keywords}")
    if options.pdf_creator:
        args.append(f"--pdf-creator={options.pdf_creator}")

    if options.encrypt:
        args.append("--encrypt")
        info = options.encryption
        if info is not None:
            args += [
                "--key-bits",
                str(info.key_bits),
                f"--user-password={info.user_password}",
                f"--owner-password={info.owner_password}",
            ]
            if info.disallow_print:
                args.append("--disallow-print")
            if info.disallow_modify:
                args.append("--disallow-modify")
            if info.disallow_copy:
                args.append("--disallow-copy")
            if info.disallow_annotate:
                args.append("--disallow-annotate")

    return args


def build_command(
    options: RenderOptions,
    inputs: Sequence[PathLike],
    output: Optional[PathLike] = None,
) -> List[str]:
    """
    Build the full Prince argument list.

    Args:
        options: Option set
        inputs: Input documents; "-" reads markup from stdin
        output: PDF path; "-" streams the PDF to stdout (adds --silent);
                None lets Prince choose the name next to the input

    Returns:
        Argument list, executable first

    Raises:
        ValueError: If no input is given
    """
    if not inputs:
        raise ValueError("At least one input document is required")

    args = build_option_args(options)

    if output is not None and str(output) == STDIO:
        args.append("--silent")

    args += [str(path) for path in inputs]

    if output is not None and str(output).strip():
        args += ["-o", str(output)]

    return args


def quote_token(token: str) -> str:
    """Render one non-executable token for a single-string command line."""
    if _BARE_FLAG.match(token):
        return token

    match = _KEY_VALUE.match(token)
    if match:
        flag, value = match.groups()
        return f'{flag}"{escape_argument(value)}"'

    return f'"{escape_argument(token)}"'


def format_command_line(args: Sequence[str]) -> str:
    """
    Join an argument list into one command-line string.

    The executable gets bare-token quoting, every other token is quoted and
    escaped so Prince's own argument splitter reproduces it exactly.
    """
    if not args:
        return ""
    head, *rest = args
    return " ".join([add_double_quotes(head)] + [quote_token(token) for token in rest])


def process_args(args: Sequence[str]) -> Union[List[str], str]:
    """Return what to hand to process creation on this platform."""
    if sys.platform == "win32":
        return format_command_line(args)
    return list(args)


# "--name=value" options whose values never appear in error messages
SECRET_OPTIONS = ("--http-password=", "--license-key=", "--user-password=", "--owner-password=")
MASK = "***"


def mask_secrets(args: Sequence[str]) -> List[str]:
    """Replace password and license key values with a mask."""
    masked = []
    for token in args:
        for prefix in SECRET_OPTIONS:
            if token.startswith(prefix):
                token = prefix + MASK
                break
        masked.append(token)
    return masked
