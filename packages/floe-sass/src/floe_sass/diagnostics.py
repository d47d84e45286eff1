"""Diagnostics generated from Sass compiler errors.

A compiler error becomes a Diagnostic carrying up to three lines of the
offending file (previous, error, next). The error line is annotated with a
span covering the token at the reported column; the surrounding lines use
(-1, -1) to mean "no annotated span".

Every diagnostic is appended to the context's diagnostics collection as
soon as it is built and is not modified afterwards.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from floe_sass.context import PluginContext

logger = structlog.get_logger(__name__)

DIAGNOSTIC_HEADER = "sass error"

# Sass appends its own visual excerpt after this marker.
EXCERPT_MARKER = "╷"

# Stdin input reports this placeholder instead of a file path.
STDIN_FILE = "stdin"

MAX_DISPLAY_PATH_LENGTH = 80

# Characters that bound the highlighted token. "" stands for "past the end
# of the line".
STOP_CHARS = frozenset(
    [
        "",
        "\n",
        "\r",
        "\t",
        " ",
        ":",
        ";",
        ",",
        "{",
        "}",
        ".",
        "#",
        "@",
        "!",
        "[",
        "]",
        "(",
        ")",
        "&",
        "+",
        "~",
        "^",
        "*",
        "$",
    ]
)

NO_SPAN = -1

_LINE_SPLIT_REGEX = re.compile(r"\r?\n")
_SCSS_REGEX = re.compile(r"\.scss$", re.IGNORECASE)


class SourceLineContext(BaseModel):
    """One line of source shown alongside a diagnostic.

    Attributes:
        line_index: 0-based line index.
        line_number: 1-based line number.
        text: Line text without its terminator.
        error_char_start: Start of the highlighted span, -1 for none.
        error_length: Length of the highlighted span, -1 for none.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    line_index: int = Field(..., ge=0)
    line_number: int = Field(..., ge=1)
    text: str = ""
    error_char_start: int = Field(default=NO_SPAN, ge=NO_SPAN)
    error_length: int = Field(default=NO_SPAN, ge=NO_SPAN)


class Diagnostic(BaseModel):
    """Structured report of a Sass compilation error.

    ``model_dump(by_alias=True)`` produces the record shape the host's
    diagnostics reporter consumes (``relFilePath``, ``messageText``, ...).

    Example:
        >>> diagnostic.model_dump(by_alias=True)["messageText"]
        'Undefined variable.'
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    level: Literal["error", "warn", "info", "log", "debug"] = "error"
    type: str = "css"
    language: Literal["scss", "sass"] = "scss"
    header: str = DIAGNOSTIC_HEADER
    code: str = ""
    rel_file_path: str | None = None
    abs_file_path: str | None = None
    message_text: str = ""
    line_number: int | None = None
    column_number: int | None = None
    lines: list[SourceLineContext] = Field(default_factory=list)


def format_code(status: Any) -> str:
    """Stringify a compiler status code; "" when absent."""
    if status is None:
        return ""
    return str(status)


def format_message(message: Any) -> str:
    """Return the compiler message up to the first '╷'.

    Everything after the marker is Sass's own source excerpt, which the
    diagnostic replaces with its line context.
    """
    if not isinstance(message, str):
        return ""
    return message.split(EXCERPT_MARKER)[0]


def format_file_name(root_dir: str | None, file_name: str | None) -> str:
    """Shorten a path for display.

    Strips the project root and one leading separator, then keeps the last
    80 characters behind an ellipsis.

    Example:
        >>> format_file_name("/project", "/project/src/button.scss")
        'src/button.scss'
    """
    if not root_dir or not file_name:
        return ""

    file_name = file_name.replace(root_dir, "", 1)
    if file_name[:1] in ("/", "\\"):
        file_name = file_name[1:]

    if len(file_name) > MAX_DISPLAY_PATH_LENGTH:
        file_name = "..." + file_name[-MAX_DISPLAY_PATH_LENGTH:]

    return file_name


def find_error_span(text: str, column: int) -> tuple[int, int]:
    """Find the token to highlight around a reported column.

    Scans backwards from the column to the start of the token, then
    forwards to its end. When the column sits on a stop character right
    after a token, that single preceding character is highlighted.

    Args:
        text: Text of the error line.
        column: Column reported by the compiler.

    Returns:
        (error_char_start, error_length), both >= 0.

    Example:
        >>> find_error_span("  color: red;", 10)
        (9, 3)
    """
    error_char_start = max(column, 0)

    for i in range(error_char_start, -1, -1):
        if _char_at(text, i) in STOP_CHARS:
            break
        error_char_start = i

    error_length = 0
    for j in range(error_char_start, len(text) + 1):
        if _char_at(text, j) in STOP_CHARS:
            break
        error_length += 1

    if error_length == 0 and error_char_start > 0:
        error_length = 1
        error_char_start -= 1

    return error_char_start, error_length


def load_diagnostic(
    context: PluginContext | None,
    error: Any,
    file_path: str | None,
) -> Diagnostic | None:
    """Build a Diagnostic from a compiler error and record it on the context.

    The path carried by the error wins over ``file_path`` unless it is the
    "stdin" placeholder. Source lines are read through the host file system;
    a read failure is logged and the diagnostic is returned without lines.

    Args:
        context: Runtime context owning the diagnostics collection.
        error: Compiler error (a SassCompileError or any object exposing
            message/status/file/line/column attributes).
        file_path: Path of the file being compiled.

    Returns:
        The recorded Diagnostic, or None if error or context is missing.
    """
    if error is None or context is None:
        return None

    fields: dict[str, Any] = {
        "code": format_code(getattr(error, "status", None)),
        "message_text": format_message(getattr(error, "message", None)),
    }

    error_file = getattr(error, "file", None)
    if isinstance(error_file, str) and error_file != STDIN_FILE:
        file_path = error_file

    if isinstance(file_path, str):
        fields["language"] = "scss" if _SCSS_REGEX.search(file_path) else "sass"
        fields["abs_file_path"] = file_path
        fields["rel_file_path"] = format_file_name(context.config.root_dir, file_path)

        error_line_number = getattr(error, "line", None)
        error_column = getattr(error, "column", None)
        if isinstance(error_line_number, int):
            fields["line_number"] = error_line_number
            fields["column_number"] = error_column
            if error_line_number - 1 > -1:
                fields["lines"] = _load_line_context(
                    context, file_path, error_line_number, error_column
                )

    diagnostic = Diagnostic(**fields)
    context.diagnostics.append(diagnostic)
    return diagnostic


def load_minimal_diagnostic(context: PluginContext, exc: BaseException) -> Diagnostic:
    """Record a message-only diagnostic for an unexpected failure."""
    diagnostic = Diagnostic(message_text=str(exc))
    context.diagnostics.append(diagnostic)
    return diagnostic


def _load_line_context(
    context: PluginContext,
    file_path: str,
    error_line_number: int,
    error_column: int | None,
) -> list[SourceLineContext]:
    try:
        source_text = context.fs.read_file_sync(file_path)
    except Exception as e:
        logger.error("diagnostic_source_read_failed", file_path=file_path, error=str(e))
        return []

    src_lines = _LINE_SPLIT_REGEX.split(source_text)
    error_line_index = error_line_number - 1
    error_text = src_lines[error_line_index] if error_line_index < len(src_lines) else ""
    error_char_start, error_length = find_error_span(error_text, error_column or 0)

    lines = [
        SourceLineContext(
            line_index=error_line_index,
            line_number=error_line_number,
            text=error_text,
            error_char_start=error_char_start,
            error_length=error_length,
        )
    ]

    previous_index = error_line_index - 1
    if 0 <= previous_index < len(src_lines):
        lines.insert(
            0,
            SourceLineContext(
                line_index=previous_index,
                line_number=error_line_number - 1,
                text=src_lines[previous_index],
            ),
        )

    next_index = error_line_index + 1
    if next_index < len(src_lines):
        lines.append(
            SourceLineContext(
                line_index=next_index,
                line_number=error_line_number + 1,
                text=src_lines[next_index],
            )
        )

    return lines


def _char_at(text: str, index: int) -> str:
    if 0 <= index < len(text):
        return text[index]
    return ""
