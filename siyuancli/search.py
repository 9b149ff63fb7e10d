"""Full-text search over blocks and documents."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from . import output
from .documents import find_notebook
from .models import CommandError

logger = logging.getLogger(__name__)


def doc_id_from_path(path: str) -> str:
    """The document ID in a storage path such as ``/a/20200101000000-abc.sy``."""
    trimmed = path.rstrip("/")
    if not trimmed:
        base = "/" if path else "."
    else:
        base = trimmed.rsplit("/", 1)[-1]
    return base.removesuffix(".sy")


def doc_title(title: str, hpath: str) -> str:
    """``title`` if set, else the last segment of ``hpath``."""
    if title:
        return title
    return hpath.rsplit("/", 1)[-1]


def _text(item: Mapping[str, Any], key: str) -> str:
    value = item.get(key)
    return value if isinstance(value, str) else ""


def _require_keyword(keyword: str, kind: str) -> None:
    if not keyword.strip():
        print("❌ 错误: 请提供搜索关键词")
        print(f"💡 使用方法: siyuan-cli search {kind} <关键词>")
        raise CommandError("搜索关键词不能为空")


def _narrow(client: Any, results: list, notebook: str, limit: int) -> list:
    if notebook:
        try:
            notebooks = list(client.list_notebooks())
        except Exception as err:
            print(f"❌ 获取笔记本列表失败: {err}")
            raise CommandError(f"获取笔记本列表失败: {err}") from err
        try:
            nb_id, _ = find_notebook(notebooks, notebook)
        except CommandError as err:
            print(f"❌ {err}")
            raise
        results = [r for r in results if _text(r, "box") == nb_id]
    if limit > 0:
        results = results[:limit]
    return results


def _emit_json(data: Any, output_file: str) -> None:
    if output_file:
        output.write_json_file(data, output_file)
    else:
        output.print_json(data)


def search_block(
    client: Any, keyword: str, notebook: str = "", limit: int = 0, output_file: str = ""
) -> list[Mapping[str, Any]]:
    """Search blocks by keyword, optionally within one notebook; print and return the hits."""
    logger.info("搜索块: %s", keyword)
    _require_keyword(keyword, "block")

    try:
        results = list(client.full_text_search_block(keyword))
    except Exception as err:
        print(f"❌ 搜索块失败: {err}")
        raise CommandError(f"搜索块失败: {err}") from err

    results = _narrow(client, results, notebook, limit)

    if output.is_json() or output_file:
        _emit_json(results, output_file)
        return results

    if not results:
        print("未找到匹配的块")
        return results

    print(f"找到 {len(results)} 个匹配块:\n")
    rows = [
        [
            _text(r, "id"),
            _text(r, "type"),
            output.truncate(_text(r, "content").replace("\n", " "), 50),
            _text(r, "hpath"),
        ]
        for r in results
    ]
    output.print_table(["ID", "类型", "内容", "文档路径"], rows)
    return results


def search_doc(
    client: Any, keyword: str, notebook: str = "", limit: int = 0, output_file: str = ""
) -> list[Mapping[str, Any]]:
    """Search documents by keyword, optionally within one notebook; print and return the hits."""
    logger.info("搜索文档: keyword=%s notebook=%s", keyword, notebook)
    _require_keyword(keyword, "doc")

    try:
        results = list(client.search_docs(keyword))
    except Exception as err:
        print(f"❌ 搜索文档失败: {err}")
        raise CommandError(f"搜索文档失败: {err}") from err

    results = _narrow(client, results, notebook, limit)

    if output.is_json() or output_file:
        enriched: Sequence[dict[str, str]] = [
            {
                "id": doc_id_from_path(_text(r, "path")),
                "title": doc_title(_text(r, "title"), _text(r, "hpath")),
                "hpath": _text(r, "hpath"),
                "box": _text(r, "box"),
                "path": _text(r, "path"),
            }
            for r in results
        ]
        _emit_json(list(enriched), output_file)
        return results

    if not results:
        print("未找到匹配的文档")
        return results

    print(f"找到 {len(results)} 个匹配文档:\n")
    rows = [
        [
            _text(r, "id") or doc_id_from_path(_text(r, "path")),
            output.truncate(doc_title(_text(r, "title"), _text(r, "hpath")), 40),
            _text(r, "hpath"),
        ]
        for r in results
    ]
    output.print_table(["ID", "标题", "路径"], rows)
    return results