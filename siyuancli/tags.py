"""Tag search and document tag editing."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from . import output
from .blocks import resolve_doc_id
from .models import CommandError

logger = logging.getLogger(__name__)


def parse_tags(value: str | None) -> list[str]:
    """Split a comma-separated ``tags`` attribute into unique, trimmed tags in order."""
    if not value:
        return []
    unique = dict.fromkeys(part.strip() for part in value.split(","))
    return [tag for tag in unique if tag]


def _emit_json(data: Any, output_file: str) -> None:
    if output_file:
        output.write_json_file(data, output_file)
    else:
        output.print_json(data)


def _target_doc(client: Any, doc_id: str, notebook: str, path: str) -> str:
    if doc_id:
        return doc_id
    try:
        return resolve_doc_id(client, notebook, path)
    except CommandError as err:
        print(f"❌ {err}")
        raise


def _current_tags(client: Any, doc_id: str) -> list[str]:
    attrs = client.get_block_attrs(doc_id) or {}
    return parse_tags(attrs.get("tags", ""))


def _store_tags(client: Any, doc_id: str, tags: list[str]) -> None:
    try:
        client.set_block_attrs(doc_id, {"tags": ",".join(tags)})
    except Exception as err:
        print(f"❌ 设置标签失败: {err}")
        raise CommandError(f"设置标签失败: {err}") from err


def search_tags(client: Any, keyword: str, output_file: str = "") -> list[str]:
    """Search tags by keyword; print and return the matching labels."""
    logger.info("搜索标签: %s", keyword)
    if not keyword.strip():
        print("❌ 错误: 请提供搜索关键词")
        print("💡 使用方法: siyuan-cli tag search <关键词>")
        raise CommandError("搜索关键词不能为空")

    try:
        labels = list(client.search_tag(keyword))
    except Exception as err:
        print(f"❌ 搜索标签失败: {err}")
        raise CommandError(f"搜索标签失败: {err}") from err

    if output.is_json() or output_file:
        _emit_json(labels, output_file)
        return labels

    if not labels:
        print("未找到匹配的标签")
        return labels

    print(f"找到 {len(labels)} 个匹配标签:\n")
    for label in labels:
        print(f"  #{label}")
    return labels


def add_tags(
    client: Any, tags: Iterable[str], doc_id: str = "", notebook: str = "", path: str = ""
) -> list[str]:
    """Add tags to a document, keeping the ones it has; return the stored tags."""
    tags = list(tags)
    logger.info("添加标签: doc=%s notebook=%s path=%s tags=%s", doc_id, notebook, path, tags)
    if not tags:
        print("❌ 错误: 请使用 --tag 指定至少一个标签")
        print('💡 使用方法: siyuan-cli tag add <doc-id> --tag "标签1" --tag "标签2"')
        raise CommandError("标签不能为空")

    target = _target_doc(client, doc_id, notebook, path)
    try:
        existing = _current_tags(client, target)
    except Exception as err:
        logger.warning("获取文档属性失败: %s", err)
        existing = []

    merged = list(dict.fromkeys([*existing, *tags]))
    _store_tags(client, target, merged)
    print(f"✅ 已为文档设置标签: {', '.join(tags)}")
    return merged


def remove_tag(
    client: Any, tag: str, doc_id: str = "", notebook: str = "", path: str = ""
) -> list[str]:
    """Remove one tag from a document; return the tags left."""
    logger.info("移除标签: doc=%s notebook=%s path=%s tag=%s", doc_id, notebook, path, tag)
    if not tag.strip():
        print("❌ 错误: 请使用 --tag 指定要移除的标签")
        print('💡 使用方法: siyuan-cli tag remove <doc-id> --tag "标签"')
        raise CommandError("标签不能为空")

    target = _target_doc(client, doc_id, notebook, path)
    try:
        existing = _current_tags(client, target)
    except Exception as err:
        print(f"❌ 获取文档属性失败: {err}")
        raise CommandError(f"获取文档属性失败: {err}") from err

    remaining = [t for t in existing if t != tag]
    _store_tags(client, target, remaining)
    print(f"✅ 已移除标签: {tag}")
    return remaining