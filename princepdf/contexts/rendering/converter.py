"""
Prince Conversion Module

Runs Prince on files or markup strings and reduces its status stream to a
ConversionResult.

Prince talks over three pipes: markup in on stdin, PDF out on stdout,
status lines on stderr. Each pipe is served by its own thread (stdin
writer, stderr status reader) while the calling thread copies stdout, so
a full pipe buffer on one side never blocks the others.
"""

import os
import shutil
import subprocess
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, BinaryIO, List, Optional, Sequence, Tuple, Union

from dotenv import load_dotenv

from princepdf.contexts.configuration.options import RenderOptions
from princepdf.contexts.rendering.command import (
    STDIO,
    PathLike,
    build_command,
    format_command_line,
    mask_secrets,
    process_args,
)
from princepdf.contexts.rendering.exceptions import ConversionFailedError, PrinceExecutionError
from princepdf.contexts.rendering.logger import (
    _log_debug,
    log_conversion_result,
    log_conversion_start,
)
from princepdf.contexts.rendering.status_protocol import (
    RunVerdict,
    Severity,
    StatusLineParser,
    StatusMessage,
    StatusReport,
)
from princepdf.utils.pdf_processing import page_count

load_dotenv()

_timeout_env = os.getenv("PRINCE_TIMEOUT", "").strip()
DEFAULT_TIMEOUT: Optional[float] = float(_timeout_env) if _timeout_env else None

# Copy size for the PDF stream on stdout
CHUNK_SIZE = 64 * 1024


@dataclass
class ConversionResult:
    """
    Result of one Prince run.

    Attributes:
        success: True only when Prince reported "fin|success" in time
        verdict: Verdict from the status stream (FAILURE if none arrived)
        messages: Status messages in the order Prince emitted them
        command_line: The command line that was run
        returncode: Prince exit status (None if it never exited normally)
        pdf_path: Path to the generated PDF (None when streaming or failed)
        page_count: Number of pages in the generated PDF (None if unavailable)
        finished: Whether the status stream contained its terminal "fin|" line
        timed_out: Whether Prince was killed for exceeding the timeout
    """

    success: bool
    verdict: RunVerdict = RunVerdict.FAILURE
    messages: List[StatusMessage] = field(default_factory=list)
    command_line: str = ""
    returncode: Optional[int] = None
    pdf_path: Optional[Path] = None
    page_count: Optional[int] = None
    finished: bool = False
    timed_out: bool = False

    def _with_severity(self, severity: Severity) -> List[StatusMessage]:
        return [message for message in self.messages if message.severity is severity]

    @property
    def errors(self) -> List[StatusMessage]:
        return self._with_severity(Severity.ERROR)

    @property
    def warnings(self) -> List[StatusMessage]:
        return self._with_severity(Severity.WARNING)

    @property
    def infos(self) -> List[StatusMessage]:
        return self._with_severity(Severity.INFO)

    def raise_for_status(self) -> None:
        """Raise ConversionFailedError if the run did not succeed."""
        if not self.success:
            raise ConversionFailedError(self)


def _write_input(stream: IO[bytes], data: bytes) -> None:
    """Feed markup to Prince and close stdin so it sees end of input."""
    try:
        stream.write(data)
        stream.close()
    except BrokenPipeError:
        # Prince stopped reading, its status stream says why
        _log_debug("Prince closed stdin before all markup was written")


def _read_status(stream: IO[bytes], parser: StatusLineParser) -> None:
    """Parse the status stream, then drain whatever follows the final line."""
    parser.parse(stream)
    for _ in stream:
        pass


def _kill_on_timeout(proc: subprocess.Popen, timed_out: threading.Event) -> None:
    if proc.poll() is None:
        timed_out.set()
        proc.kill()


def run_prince(
    args: Sequence[str],
    markup: Optional[bytes] = None,
    output: Optional[BinaryIO] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
) -> Tuple[StatusReport, Optional[int], bool]:
    """
    Run Prince once and collect its status.

    Args:
        args: Argument list from build_command()
        markup: Bytes to write to stdin (None leaves stdin unused)
        output: Binary writer receiving stdout (None discards stdout)
        timeout: Seconds before Prince is killed (None waits forever)

    Returns:
        Tuple of (status report, exit code, timed out)

    Raises:
        PrinceExecutionError: If Prince cannot be started
    """
    try:
        proc = subprocess.Popen(
            process_args(args),
            stdin=subprocess.PIPE if markup is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE if output is not None else subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        raise PrinceExecutionError(
            f"Failed to execute {args[0]}",
            command_line=format_command_line(mask_secrets(args)),
            original_error=e,
        ) from e

    parser = StatusLineParser()
    timed_out = threading.Event()

    # Popen as a context manager closes all three pipes and reaps the process
    with proc:
        timer = None
        if timeout is not None:
            timer = threading.Timer(timeout, _kill_on_timeout, args=(proc, timed_out))
            timer.daemon = True
            timer.start()

        status_reader = threading.Thread(
            target=_read_status, args=(proc.stderr, parser), name="prince-status", daemon=True
        )
        status_reader.start()

        writer = None
        if markup is not None:
            writer = threading.Thread(
                target=_write_input, args=(proc.stdin, markup), name="prince-stdin", daemon=True
            )
            writer.start()

        try:
            if output is not None:
                shutil.copyfileobj(proc.stdout, output, CHUNK_SIZE)
            if writer is not None:
                writer.join()
            status_reader.join()
            returncode = proc.wait()
        finally:
            if timer is not None:
                timer.cancel()
            if proc.poll() is None:
                # Only reached when copying the output failed
                proc.kill()
            # Pipe threads must finish before the context manager closes the pipes
            if writer is not None:
                writer.join()
            status_reader.join()

    report = parser.report
    if timed_out.is_set():
        report.verdict = RunVerdict.FAILURE

    return report, returncode, timed_out.is_set()


def _encode_markup(markup: Union[str, bytes]) -> bytes:
    return markup.encode("utf-8") if isinstance(markup, str) else markup


def _convert(
    options: Optional[RenderOptions],
    inputs: Sequence[PathLike],
    output: Optional[PathLike],
    markup: Optional[bytes] = None,
    output_stream: Optional[BinaryIO] = None,
    expected_pdf: Optional[Path] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    verbose: bool = False,
) -> ConversionResult:
    options = options if options is not None else RenderOptions()
    args = build_command(options, inputs, output)
    command_line = format_command_line(args)

    log_conversion_start(
        [str(path) for path in inputs],
        str(output) if output is not None else "(next to input)",
        command_line,
    )
    start_time = time.time()

    report, returncode, timed_out = run_prince(
        args, markup=markup, output=output_stream, timeout=timeout
    )

    success = report.success and not timed_out
    pdf_path = expected_pdf if success and expected_pdf and expected_pdf.exists() else None

    result = ConversionResult(
        success=success,
        verdict=report.verdict,
        messages=list(report.messages),
        command_line=command_line,
        returncode=returncode,
        pdf_path=pdf_path,
        page_count=page_count(pdf_path) if pdf_path else None,
        finished=report.finished,
        timed_out=timed_out,
    )

    log_conversion_result(result, elapsed_time=time.time() - start_time, verbose=verbose)
    return result


def _default_pdf_path(first_input: PathLike) -> Path:
    """Where Prince writes its PDF when no output path is given."""
    return Path(first_input).with_suffix(".pdf")


def convert_multiple_files(
    xml_paths: Sequence[PathLike],
    pdf_path: Optional[PathLike] = None,
    options: Optional[RenderOptions] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    verbose: bool = False,
) -> ConversionResult:
    """
    Convert one or more documents into a single PDF file.

    Args:
        xml_paths: Input documents, concatenated in order
        pdf_path: Output PDF (default: first input with a .pdf suffix)
        options: Prince option set (default: RenderOptions())
        timeout: Seconds before Prince is killed (default: PRINCE_TIMEOUT env)
        verbose: Log every status message

    Returns:
        ConversionResult with verdict, messages and PDF path

    Raises:
        PrinceExecutionError: If Prince cannot be started
    """
    if not xml_paths:
        raise ValueError("At least one input document is required")
    if pdf_path is not None and not str(pdf_path).strip():
        pdf_path = None
    expected = Path(pdf_path) if pdf_path is not None else _default_pdf_path(xml_paths[0])

    return _convert(
        options,
        xml_paths,
        pdf_path,
        expected_pdf=expected,
        timeout=timeout,
        verbose=verbose,
    )


def convert_file_to_file(
    xml_path: PathLike,
    pdf_path: Optional[PathLike] = None,
    options: Optional[RenderOptions] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    verbose: bool = False,
) -> ConversionResult:
    """Convert one document into a PDF file. See convert_multiple_files()."""
    return convert_multiple_files([xml_path], pdf_path, options, timeout, verbose)


def convert_multiple_files_to_stream(
    xml_paths: Sequence[PathLike],
    output: BinaryIO,
    options: Optional[RenderOptions] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    verbose: bool = False,
) -> ConversionResult:
    """
    Convert one or more documents and write the PDF to a binary stream.

    Args:
        xml_paths: Input documents, concatenated in order
        output: Binary writer receiving the PDF bytes
        options: Prince option set (default: RenderOptions())
        timeout: Seconds before Prince is killed
        verbose: Log every status message

    Returns:
        ConversionResult (pdf_path is always None)
    """
    return _convert(
        options,
        xml_paths,
        STDIO,
        output_stream=output,
        timeout=timeout,
        verbose=verbose,
    )


def convert_file_to_stream(
    xml_path: PathLike,
    output: BinaryIO,
    options: Optional[RenderOptions] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    verbose: bool = False,
) -> ConversionResult:
    """Convert one document and write the PDF to a binary stream."""
    return convert_multiple_files_to_stream([xml_path], output, options, timeout, verbose)


def convert_string_to_stream(
    markup: Union[str, bytes],
    output: BinaryIO,
    options: Optional[RenderOptions] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    verbose: bool = False,
) -> ConversionResult:
    """
    Convert markup held in memory and write the PDF to a binary stream.

    Args:
        markup: Source document (str is encoded as UTF-8)
        output: Binary writer receiving the PDF bytes
        options: Prince option set; set input_type when the markup is not
                 recognisable on its own
        timeout: Seconds before Prince is killed
        verbose: Log every status message
    """
    return _convert(
        options,
        [STDIO],
        STDIO,
        markup=_encode_markup(markup),
        output_stream=output,
        timeout=timeout,
        verbose=verbose,
    )


def convert_string_to_file(
    markup: Union[str, bytes],
    pdf_path: PathLike,
    options: Optional[RenderOptions] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    verbose: bool = False,
) -> ConversionResult:
    """
    Convert markup held in memory into a PDF file.

    Raises:
        ValueError: If pdf_path is empty
    """
    if not str(pdf_path).strip():
        raise ValueError("pdf_path is required when converting a string to a file")

    return _convert(
        options,
        [STDIO],
        pdf_path,
        markup=_encode_markup(markup),
        expected_pdf=Path(pdf_path),
        timeout=timeout,
        verbose=verbose,
    )
