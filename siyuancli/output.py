"""Table and JSON output helpers."""

from __future__ import annotations

import dataclasses
import json
import os
import sys
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Sequence

from wcwidth import wcswidth, wcwidth

from .models import CommandError

_WIDTH_MAX = 60
_global_format = ""


def set_format(fmt: str) -> None:
    """Set the default output format."""
    global _global_format
    _global_format = fmt


def get_format(override: str = "") -> str:
    """Return ``override`` if given, else the default format."""
    return override or _global_format


def is_json(override: str = "") -> bool:
    """Whether output should be JSON."""
    return get_format(override) == "json"


def _display_width(text: str) -> int:
    width = wcswidth(text)
    return width if width >= 0 else len(text)


def _wrap(text: str, limit: int) -> list[str]:
    lines = []
    for part in text.split("\n"):
        current, width = "", 0
        for ch in part:
            cw = max(wcwidth(ch), 0)
            if current and width + cw > limit:
                lines.append(current)
                current, width = "", 0
            current += ch
            width += cw
        lines.append(current)
    return lines


def _pad(text: str, width: int, right: bool) -> str:
    fill = " " * (width - _display_width(text))
    return fill + text if right else text + fill


def render_table(
    headers: Sequence[str], rows: Iterable[Sequence[Any]], right_cols: Iterable[int] = ()
) -> str:
    """Render a borderless table; ``right_cols`` are 1-based column numbers."""
    right = set(right_cols)
    rows = [list(row) for row in rows]
    ncols = max([len(headers)] + [len(row) for row in rows])

    def cells(values: Sequence[Any], upper: bool = False) -> list[list[str]]:
        padded = [str(v) for v in values] + [""] * (ncols - len(values))
        return [_wrap(v.upper() if upper else v, _WIDTH_MAX) for v in padded]

    header = cells(headers, upper=True)
    body = [cells(row) for row in rows]
    widths = [
        max((_display_width(line) for row in [header, *body] for line in row[col]), default=0)
        for col in range(ncols)
    ]

    def render_row(row: list[list[str]]) -> list[str]:
        height = max((len(cell) for cell in row), default=1)
        out = []
        for i in range(height):
            parts = []
            for col, cell in enumerate(row):
                text = cell[i] if i < len(cell) else ""
                parts.append(" " + _pad(text, widths[col], col + 1 in right) + " ")
            out.append("".join(parts))
        return out

    lines = render_row(header)
    lines.append("".join("-" * (w + 2) for w in widths))
    for row in body:
        lines.extend(render_row(row))
    return "\n".join(lines)


def print_table(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
    """Print a table with every column left aligned."""
    print(render_table(headers, rows))


def print_table_right(headers: Sequence[str], rows: Iterable[Sequence[Any]], *args: int) -> None:
    """Print a table with the given 1-based columns right aligned."""
    print(render_table(headers, rows, args))


def truncate(s: str, max_len: int) -> str:
    """Flatten newlines and cut ``s`` to ``max_len`` characters with an ellipsis."""
    s = s.replace("\n", " ")
    if len(s) <= max_len:
        return s
    if max_len < 1:
        raise ValueError(f"max_len must be positive, got {max_len}")
    return s[: max_len - 1] + "…"


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    raise TypeError(f"cannot encode {type(obj).__name__}")


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=_default)


def print_json(data: Any) -> None:
    """Print ``data`` as indented JSON, reporting encoding failures on stderr."""
    try:
        text = _dumps(data)
    except (TypeError, ValueError) as err:
        print(f"JSON 编码失败: {err}", file=sys.stderr)
        return
    print(text)


def write_json_file(data: Any, output_file: str) -> None:
    """Write ``data`` as indented JSON to ``output_file``, creating its directory."""
    try:
        text = _dumps(data)
    except (TypeError, ValueError) as err:
        raise CommandError(f"序列化JSON失败: {err}") from err
    directory = os.path.dirname(output_file)
    if directory not in ("", "."):
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as err:
            raise CommandError(f"创建输出目录失败: {err}") from err
    try:
        Path(output_file).write_text(text, encoding="utf-8")
    except OSError as err:
        raise CommandError(f"写入文件失败: {err}") from err
    print(f"已导出到: {output_file}")


def read_pipe_or_file(file_path: str = "") -> str:
    """Read ``file_path`` if given, else piped stdin, else return an empty string."""
    if file_path:
        return Path(file_path).read_text(encoding="utf-8")
    stdin = sys.stdin
    if stdin is None or stdin.isatty():
        return ""
    return stdin.read()


def get_term_size() -> tuple[int, int]:
    """Terminal width and height, falling back to 80x24."""
    try:
        size = os.get_terminal_size(sys.stdout.fileno())
    except (OSError, ValueError, AttributeError):
        return 80, 24
    return size.columns, size.lines