"""
Prince option sets.

RenderOptions holds everything that ends up on the Prince command line
except the input and output paths. It is frozen: every setter returns a new
RenderOptions, so one option set can be shared between threads and reused
across conversions.

Example:
    >>> options = (
    ...     RenderOptions()
    ...     .add_style_sheet("print.css")
    ...     .with_input_type("html")
    ...     .with_options(pdf_title="Quarterly Report", compress=False)
    ... )
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from princepdf.contexts.configuration.exceptions import InputTypeError, InvalidOptionError

load_dotenv()

DEFAULT_EXE_PATH = os.getenv("PRINCE_EXECUTABLE") or "/usr/local/bin/prince"

INPUT_TYPES = ("auto", "xml", "html")
DEFAULT_INPUT_TYPE = "auto"

# Prince only supports RC4 with these key lengths
KEY_BITS = (40, 128)

# Options holding a list of file paths, one Prince argument per entry
PATH_LIST_OPTIONS = ("style_sheets", "scripts", "file_attachments")


def _path_tuple(name: str, value) -> Tuple[str, ...]:
    """Normalize a path-list value; a single path becomes a 1-tuple."""
    if isinstance(value, (str, Path)):
        return (str(value),)
    if not isinstance(value, (list, tuple)):
        raise InvalidOptionError(
            f"{name} must be a path or a list of paths", option=name, value=value
        )
    return tuple(str(path) for path in value)


@dataclass(frozen=True)
class EncryptionInfo:
    """
    PDF encryption parameters.

    Attributes:
        key_bits: 40 or 128
        user_password: Password required to open the PDF
        owner_password: Password required to change permissions
        disallow_print: Forbid printing
        disallow_modify: Forbid modification
        disallow_copy: Forbid copying text and graphics
        disallow_annotate: Forbid adding annotations
    """

    key_bits: int
    user_password: str
    owner_password: str
    disallow_print: bool = False
    disallow_modify: bool = False
    disallow_copy: bool = False
    disallow_annotate: bool = False

    def __post_init__(self) -> None:
        if self.key_bits not in KEY_BITS:
            raise InvalidOptionError(
                f"Invalid value for key_bits: {self.key_bits} (must be 40 or 128)",
                option="key_bits",
                value=self.key_bits,
            )

    def __repr__(self) -> str:
        # Keep passwords out of logs and tracebacks
        return (
            f"EncryptionInfo(key_bits={self.key_bits}, user_password='***', "
            f"owner_password='***', disallow_print={self.disallow_print}, "
            f"disallow_modify={self.disallow_modify}, disallow_copy={self.disallow_copy}, "
            f"disallow_annotate={self.disallow_annotate})"
        )


@dataclass(frozen=True)
class RenderOptions:
    """
    Immutable set of Prince options.

    String options left empty are not passed to Prince. Boolean options
    default to Prince's own defaults, so only deviations reach the
    command line.
    """

    exe_path: str = DEFAULT_EXE_PATH
    style_sheets: Tuple[str, ...] = ()
    scripts: Tuple[str, ...] = ()
    file_attachments: Tuple[str, ...] = ()
    license_file: str = ""
    license_key: str = ""
    input_type: str = DEFAULT_INPUT_TYPE
    javascript: bool = False
    base_url: str = ""
    xinclude: bool = True
    http_user: str = ""
    http_password: str = ""
    http_proxy: str = ""
    insecure: bool = False
    log_file: str = ""
    file_root: str = ""
    embed_fonts: bool = True
    subset_fonts: bool = True
    artificial_fonts: bool = True
    compress: bool = True
    pdf_title: str = ""
    pdf_subject: str = ""
    pdf_author: str = ""
    pdf_keywords: str = ""
    pdf_creator: str = ""
    encrypt: bool = False
    encryption: Optional[EncryptionInfo] = None

    def __post_init__(self) -> None:
        if self.input_type not in INPUT_TYPES:
            raise InputTypeError(self.input_type, INPUT_TYPES)
        # Leading whitespace would become an empty argv[0] on some platforms
        object.__setattr__(self, "exe_path", self.exe_path.lstrip())

    def __repr__(self) -> str:
        changed = []
        for f in fields(self):
            value = getattr(self, f.name)
            if value == f.default:
                continue
            if f.name in ("http_password", "license_key"):
                value = "***"
            changed.append(f"{f.name}={value!r}")
        return f"RenderOptions({', '.join(changed)})"

    @classmethod
    def option_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def with_options(self, **changes) -> "RenderOptions":
        """
        Return a copy with the given fields replaced.

        Raises:
            InvalidOptionError: If a field name is unknown
        """
        unknown = set(changes) - set(self.option_names())
        if unknown:
            name = sorted(unknown)[0]
            raise InvalidOptionError(f"Unknown option: {name}", option=name)

        for name in PATH_LIST_OPTIONS:
            if name in changes:
                changes[name] = _path_tuple(name, changes[name])

        return replace(self, **changes)

    def with_exe_path(self, exe_path: str) -> "RenderOptions":
        return replace(self, exe_path=exe_path)

    def add_style_sheet(self, css_path: str) -> "RenderOptions":
        """Apply a style sheet to every document. Include the file name in the path."""
        return replace(self, style_sheets=self.style_sheets + (str(css_path),))

    def clear_style_sheets(self) -> "RenderOptions":
        return replace(self, style_sheets=())

    def add_script(self, js_path: str) -> "RenderOptions":
        """Run a JavaScript file before conversion."""
        return replace(self, scripts=self.scripts + (str(js_path),))

    def clear_scripts(self) -> "RenderOptions":
        return replace(self, scripts=())

    def add_file_attachment(self, file_path: str) -> "RenderOptions":
        """Attach a file to the generated PDF."""
        return replace(self, file_attachments=self.file_attachments + (str(file_path),))

    def clear_file_attachments(self) -> "RenderOptions":
        return replace(self, file_attachments=())

    def with_input_type(self, input_type: str) -> "RenderOptions":
        """
        Set the source type ("auto", "xml" or "html").

        Raises:
            InputTypeError: For any other value
        """
        if input_type not in INPUT_TYPES:
            raise InputTypeError(input_type, INPUT_TYPES)
        return replace(self, input_type=input_type)

    def with_javascript(self, enabled: bool = True) -> "RenderOptions":
        """Run JavaScript found in the documents."""
        return replace(self, javascript=bool(enabled))

    def with_xinclude(self, enabled: bool = True) -> "RenderOptions":
        return replace(self, xinclude=bool(enabled))

    def with_http_auth(self, user: str, password: str) -> "RenderOptions":
        """Basic auth credentials for fetching remote resources."""
        return replace(self, http_user=user, http_password=password)

    def with_pdf_metadata(
        self,
        title: Optional[str] = None,
        subject: Optional[str] = None,
        author: Optional[str] = None,
        keywords: Optional[str] = None,
        creator: Optional[str] = None,
    ) -> "RenderOptions":
        """Set PDF document metadata. Fields left as None keep their current value."""
        changes = {
            "pdf_title": title,
            "pdf_subject": subject,
            "pdf_author": author,
            "pdf_keywords": keywords,
            "pdf_creator": creator,
        }
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def with_encryption(
        self,
        key_bits: int,
        user_password: str,
        owner_password: str,
        disallow_print: bool = False,
        disallow_modify: bool = False,
        disallow_copy: bool = False,
        disallow_annotate: bool = False,
    ) -> "RenderOptions":
        """
        Set encryption parameters and enable encryption.

        Raises:
            InvalidOptionError: If key_bits is not 40 or 128
        """
        info = EncryptionInfo(
            key_bits=int(key_bits),
            user_password=user_password,
            owner_password=owner_password,
            disallow_print=disallow_print,
            disallow_modify=disallow_modify,
            disallow_copy=disallow_copy,
            disallow_annotate=disallow_annotate,
        )
        return replace(self, encrypt=True, encryption=info)

    def without_encryption(self) -> "RenderOptions":
        return replace(self, encrypt=False, encryption=None)
