"""Exporting single documents to Markdown, HTML or Word."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from .documents import find_notebook, resolve_doc_path
from .models import CommandError

logger = logging.getLogger(__name__)

_FORMATS = ("md", "html", "docx")


def resolve_doc_id(client: Any, notebook: str, path: str) -> str:
    """The ID of the document at ``path`` in the given notebook."""
    try:
        notebooks = list(client.list_notebooks())
    except Exception as err:
        raise CommandError(f"获取笔记本列表失败: {err}") from err
    nb_id, nb_name = find_notebook(notebooks, notebook)
    resolved = resolve_doc_path(client, nb_id, nb_name, path)
    if resolved.endswith("/"):
        resolved = resolved[:-1]
    return resolved.rsplit("/", 1)[-1]


def write_to_file(path: str, data: str | bytes) -> None:
    """Write ``data`` to ``path``, creating its directory first."""
    directory = os.path.dirname(path)
    if directory not in ("", "."):
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as err:
            raise CommandError(f"创建目录失败: {err}") from err
    payload = data.encode("utf-8") if isinstance(data, str) else data
    try:
        Path(path).write_bytes(payload)
    except OSError as err:
        raise CommandError(f"写入文件失败: {err}") from err


def _call(label: str, func, *args):
    try:
        return func(*args)
    except Exception as err:
        print(f"❌ 导出 {label} 失败: {err}")
        raise CommandError(f"导出 {label} 失败: {err}") from err


def export_doc(
    client: Any,
    doc_id: str = "",
    notebook: str = "",
    path: str = "",
    fmt: str = "md",
    output_file: str = "",
) -> str:
    """Export a document; return the file written, or ``""`` for Word exports kept on the server."""
    logger.info("导出文档: doc=%s notebook=%s path=%s format=%s", doc_id, notebook, path, fmt)
    kind = fmt.lower() or "md"
    if kind not in _FORMATS:
        print(f"❌ 不支持的格式: {fmt}（支持: md, html, docx）")
        raise CommandError(f"不支持的格式: {fmt}")

    if not doc_id:
        if not path.strip():
            print("❌ 错误: 请提供文档路径")
            print("💡 使用方法: siyuan-cli export doc <笔记本> <文档路径> --format <格式>")
            raise CommandError("文档路径不能为空")
        try:
            notebooks = list(client.list_notebooks())
        except Exception as err:
            print(f"❌ 获取笔记本列表失败: {err}")
            raise CommandError(f"获取笔记本列表失败: {err}") from err
        try:
            nb_id, _ = find_notebook(notebooks, notebook)
            doc_id = resolve_doc_id(client, nb_id, path)
        except CommandError as err:
            print(f"❌ {err}")
            raise

    if kind == "md":
        content, _ = _call("Markdown", client.export_md_content, doc_id)
        target = output_file or f"{doc_id}.md"
        write_to_file(target, content)
        print(f"✅ 已导出 Markdown: {target}")
        return target

    if kind == "html":
        html = _call("HTML", client.export_html, doc_id)
        target = output_file or f"{doc_id}.html"
        write_to_file(target, html)
        print(f"✅ 已导出 HTML: {target}")
        return target

    _call("Word", client.export_docx, doc_id)
    print("✅ 已导出 Word 文档（请到思源导出目录查看）")
    return ""