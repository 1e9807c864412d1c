"""
Prince status protocol parsing.

With --server, Prince reports on stderr one status line at a time:

    msg|<severity>|<location>|<text>
    fin|<verdict>

The first four characters are the tag. "fin|" ends the run and carries
"success" or "failure"; "msg|" carries one diagnostic. Lines with any other
tag are ignored so newer Prince releases can add their own.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Iterable, List, Optional, Tuple, Union

FIN_TAG = "fin|"
MSG_TAG = "msg|"
TAG_LENGTH = 4
FIELD_DELIMITER = "|"
SUCCESS_TOKEN = "success"


class Severity(Enum):
    """Severity of a status message, keyed by its wire code."""

    ERROR = "err"
    WARNING = "wrn"
    INFO = "inf"

    @classmethod
    def from_code(cls, code: str) -> "Severity":
        """Map a wire code to a severity. Unrecognised codes are treated as INFO."""
        try:
            return cls(code)
        except ValueError:
            return cls.INFO


class RunVerdict(Enum):
    """Outcome of one Prince run."""

    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def from_token(cls, token: str) -> "RunVerdict":
        return cls.SUCCESS if token == SUCCESS_TOKEN else cls.FAILURE


@dataclass(frozen=True)
class StatusMessage:
    """
    One diagnostic emitted by Prince.

    Attributes:
        severity: ERROR, WARNING or INFO
        location: File name and/or line reference (may be empty)
        text: Message text (may itself contain "|")
    """

    severity: Severity
    location: str
    text: str

    def __str__(self) -> str:
        prefix = f"{self.location}: " if self.location else ""
        return f"{prefix}{self.text}"


@dataclass
class StatusReport:
    """
    Reduced status stream: final verdict plus messages in arrival order.

    Attributes:
        verdict: SUCCESS only when a "fin|success" line was read
        messages: Messages in the order Prince emitted them
        finished: False when the stream closed without a "fin|" line
    """

    verdict: RunVerdict = RunVerdict.FAILURE
    messages: List[StatusMessage] = field(default_factory=list)
    finished: bool = False

    @property
    def success(self) -> bool:
        return self.verdict is RunVerdict.SUCCESS


def split_line(line: str) -> Tuple[str, str]:
    """Split a raw status line into (tag, body), stripping the line terminator."""
    return line[:TAG_LENGTH], line[TAG_LENGTH:].rstrip()


def parse_message_body(body: str) -> StatusMessage:
    """
    Parse a "msg|" body into a StatusMessage.

    Splits at the first two delimiters only, so the text keeps any "|" it
    contains. Missing trailing fields become empty strings.
    """
    fields = body.split(FIELD_DELIMITER, 2)
    fields += [""] * (3 - len(fields))
    severity_code, location, text = fields
    return StatusMessage(Severity.from_code(severity_code), location, text)


class StatusLineParser:
    """
    Sequential consumer of one Prince status stream.

    Use one parser per Prince run. The parser does no locking; drive it from
    the single thread that owns the stderr pipe.

    Example:
        >>> parser = StatusLineParser()
        >>> report = parser.parse(["msg|wrn|doc.html:3|Ignoring font\\n", "fin|success\\n"])
        >>> report.verdict
        <RunVerdict.SUCCESS: 'success'>
    """

    def __init__(self) -> None:
        self._report = StatusReport()

    @property
    def finished(self) -> bool:
        """True once the terminal "fin|" line has been consumed."""
        return self._report.finished

    @property
    def report(self) -> StatusReport:
        return self._report

    def feed(self, line: Union[str, bytes]) -> bool:
        """
        Consume one line.

        Args:
            line: Raw line from stderr, with or without its terminator

        Returns:
            True if this line was the terminal "fin|" line. Lines fed after
            that are ignored.
        """
        if self._report.finished:
            return True

        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")

        tag, body = split_line(line)
        if tag == FIN_TAG:
            self._report.verdict = RunVerdict.from_token(body)
            self._report.finished = True
        elif tag == MSG_TAG:
            self._report.messages.append(parse_message_body(body))

        return self._report.finished

    def parse(self, stream: Union[IO, Iterable[Union[str, bytes]]]) -> StatusReport:
        """
        Read lines until the "fin|" line or end of stream.

        A stream that ends before "fin|" leaves the verdict at FAILURE with
        finished=False. Whatever messages arrived are kept.
        """
        for line in stream:
            if self.feed(line):
                break
        return self._report


def parse_status_stream(
    stream: Union[IO, Iterable[Union[str, bytes]]],
    parser: Optional[StatusLineParser] = None,
) -> StatusReport:
    """Parse a whole status stream with a fresh parser (or the one given)."""
    return (parser or StatusLineParser()).parse(stream)
