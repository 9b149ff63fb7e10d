"""Document reading, history, copying, moving and daily notes."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from . import output
from .documents import doc_id_from_resolved, find_notebook, resolve_doc_path
from .models import CommandError, Notebook

logger = logging.getLogger(__name__)

_LIST_HINT = "💡 使用 'siyuan-cli notebook list' 查看所有可用的笔记本"
_RULE = "─" * 40


def _text(item: Mapping[str, Any], key: str) -> str:
    value = item.get(key)
    return value if isinstance(value, str) else ""


def _emit_json(data: Any, output_file: str) -> None:
    if output_file:
        output.write_json_file(data, output_file)
    else:
        output.print_json(data)


def _notebooks(client: Any) -> list[Notebook]:
    try:
        return list(client.list_notebooks())
    except Exception as err:
        print(f"❌ 获取笔记本列表失败: {err}")
        raise CommandError(f"获取笔记本列表失败: {err}") from err


def _find(notebooks: Sequence[Notebook], identifier: str, hint: bool = False) -> tuple[str, str]:
    try:
        return find_notebook(notebooks, identifier)
    except CommandError as err:
        print(f"❌ {err}")
        if hint:
            print(_LIST_HINT)
        raise


def _resolve(client: Any, nb_id: str, nb_name: str, path: str, prefix: str = "") -> str:
    try:
        return resolve_doc_path(client, nb_id, nb_name, path)
    except CommandError as err:
        print(f"❌ {prefix}{err}")
        raise


def format_doc_time(s: str) -> str:
    """Format a ``YYYYMMDDhhmmss`` stamp as ``YYYY-MM-DD hh:mm:ss``; other text is kept."""
    if len(s) != 14:
        return s
    return f"{s[0:4]}-{s[4:6]}-{s[6:8]} {s[8:10]}:{s[10:12]}:{s[12:14]}"


def get_block_meta(client: Any, doc_id: str) -> dict[str, str] | None:
    """Creation and update stamps of a block, or None if they cannot be read."""
    quoted = doc_id.replace("'", "''")
    try:
        rows = list(client.query_sql(f"SELECT created, updated FROM blocks WHERE id = '{quoted}' LIMIT 1"))
    except Exception as err:
        logger.debug("查询块元信息失败: %s", err)
        return None
    if not rows:
        return None
    row = rows[0]
    return {"created": _text(row, "created"), "updated": _text(row, "updated")}


def get_document(client: Any, notebook: str, path: str, output_file: str = "") -> dict[str, Any]:
    """Print a document's Markdown with its metadata, or write it as JSON; return the data."""
    logger.info("开始获取文档内容: notebook=%s path=%s", notebook, path)
    usage = "💡 使用方法: siyuan-cli document get <笔记本> <文档路径>"
    if not notebook.strip():
        print("❌ 错误: 请提供笔记本名称或ID")
        print(usage)
        raise CommandError("笔记本标识符不能为空")
    if not path.strip():
        print("❌ 错误: 请提供文档路径")
        print(usage)
        raise CommandError("文档路径不能为空")

    nb_id, nb_name = _find(_notebooks(client), notebook, hint=True)
    doc_id = doc_id_from_resolved(_resolve(client, nb_id, nb_name, path))
    logger.info("获取文档内容: %s", doc_id)

    try:
        content, hpath = client.export_md_content(doc_id)
    except Exception as err:
        print(f"❌ 获取文档内容失败: {err}")
        raise CommandError(f"获取文档内容失败: {err}") from err

    meta = get_block_meta(client, doc_id)
    data: dict[str, Any] = {"path": hpath, "id": doc_id, "content": content}
    if meta is not None:
        data.update(meta)

    if output.is_json() or output_file:
        _emit_json(data, output_file)
        return data

    print(f"路径:   {hpath}")
    print(f"ID:     {doc_id}")
    if meta is not None:
        if meta["created"]:
            print(f"创建:   {format_doc_time(meta['created'])}")
        if meta["updated"]:
            print(f"更新:   {format_doc_time(meta['updated'])}")
    print(_RULE)
    print(content, end="")
    return data


def get_document_history(
    client: Any,
    notebook: str = "",
    path: str = "",
    query: str = "",
    page: int = 1,
    output_file: str = "",
) -> list[Mapping[str, Any]]:
    """Show the history entries of the newest matching history snapshot and return them."""
    logger.info("获取文档历史: notebook=%s path=%s", notebook, path)

    nb_filter = ""
    if notebook:
        _find(_notebooks(client), notebook)
        nb_filter = notebook

    query = query or path

    try:
        found = client.search_history(query, nb_filter, page)
    except Exception as err:
        print(f"❌ 获取文档历史失败: {err}")
        raise CommandError(f"获取文档历史失败: {err}") from err

    histories = list(found.get("histories") or [])
    page_count = found.get("pageCount", 0)
    total_count = found.get("totalCount", 0)
    want_json = output.is_json() or bool(output_file)

    if not histories:
        if want_json:
            _emit_json(
                {
                    "query": query,
                    "notebook": nb_filter,
                    "pageCount": page_count,
                    "totalCount": total_count,
                    "history": [],
                },
                output_file,
            )
            return []
        print("没有找到历史记录")
        return []

    created = histories[0]
    try:
        items = list(client.get_history_items(created, query, nb_filter))
    except Exception as err:
        print(f"❌ 获取历史详情失败: {err}")
        raise CommandError(f"获取历史详情失败: {err}") from err

    if want_json:
        _emit_json(
            {
                "query": query,
                "notebook": nb_filter,
                "pageCount": page_count,
                "totalCount": total_count,
                "count": len(items),
                "history": items,
            },
            output_file,
        )
        return items

    if not items:
        print("没有找到历史记录")
        return items

    print(f"文档历史 (共 {total_count} 条, 第 {page}/{page_count} 页, 时间: {created}):\n")
    rows = [[_text(h, "title"), _text(h, "op"), _text(h, "path"), _text(h, "notebook")] for h in items]
    output.print_table(["标题", "操作", "文档路径", "笔记本"], rows)
    return items


def rollback_document(client: Any, history_path: str, notebook: str = "") -> str:
    """Roll a document back to a history version; return the notebook ID used."""
    logger.info("回滚文档: notebook=%s history=%s", notebook, history_path)
    if not history_path.strip():
        print("❌ 错误: 历史路径不能为空")
        print("💡 使用方法: siyuan-cli document rollback --notebook <笔记本> --to <历史路径>")
        raise CommandError("历史路径不能为空")

    nb_id = ""
    if notebook:
        nb_id, _ = _find(_notebooks(client), notebook)

    try:
        client.rollback_doc_history(nb_id, history_path)
    except Exception as err:
        print(f"❌ 回滚失败: {err}")
        raise CommandError(f"回滚失败: {err}") from err

    print(f"✅ 文档已回滚到历史版本 {history_path}")
    return nb_id


def copy_document(client: Any, notebook: str, path: str) -> str:
    """Duplicate a document; return the ID of the copied document."""
    logger.info("复制文档: notebook=%s path=%s", notebook, path)
    if not path.strip():
        print("❌ 错误: 请提供文档路径")
        print("💡 使用方法: siyuan-cli document copy <笔记本> <文档路径>")
        raise CommandError("文档路径不能为空")

    nb_id, nb_name = _find(_notebooks(client), notebook)
    doc_id = doc_id_from_resolved(_resolve(client, nb_id, nb_name, path))

    try:
        client.duplicate_doc(doc_id)
    except Exception as err:
        print(f"❌ 复制文档失败: {err}")
        raise CommandError(f"复制文档失败: {err}") from err

    print(f"✅ 已复制文档 '{path}'")
    return doc_id


def move_document(client: Any, notebook: str, src_path: str, dest_path: str) -> tuple[str, str]:
    """Move a document; ``dest_path`` may be ``notebook:/path``, a notebook, or a path.

    Returns the target notebook ID and the resolved target path.
    """
    logger.info("移动文档: notebook=%s src=%s dest=%s", notebook, src_path, dest_path)
    if not src_path.strip() or not dest_path.strip():
        print("❌ 错误: 源路径和目标路径都不能为空")
        print("💡 使用方法: siyuan-cli document move <笔记本> <源路径> <目标路径>")
        raise CommandError("路径不能为空")

    notebooks = _notebooks(client)
    nb_id, nb_name = _find(notebooks, notebook)
    src_resolved = _resolve(client, nb_id, nb_name, src_path)

    if ":" in dest_path:
        dest_nb, dest_rel = dest_path.split(":", 1)
        try:
            dest_id, dest_name = find_notebook(notebooks, dest_nb)
        except CommandError as err:
            print(f"❌ 目标笔记本未找到: {err}")
            raise
    else:
        try:
            dest_id, dest_name = find_notebook(notebooks, dest_path)
            dest_rel = "/"
        except CommandError:
            dest_id, dest_name, dest_rel = nb_id, nb_name, dest_path

    dest_resolved = _resolve(client, dest_id, dest_name, dest_rel, prefix="目标路径解析失败: ")

    try:
        client.move_docs([src_resolved], dest_id, dest_resolved)
    except Exception as err:
        print(f"❌ 移动文档失败: {err}")
        raise CommandError(f"移动文档失败: {err}") from err

    print(f"✅ 已将 '{src_path}' 移动到 '{dest_path}'（笔记本: {nb_name}）")
    return dest_id, dest_resolved


def create_daily_note(client: Any, notebook: str = "") -> Mapping[str, Any]:
    """Create today's daily note, in the first open notebook if none is given."""
    logger.info("创建日记: notebook=%s", notebook)
    notebooks = _notebooks(client)

    if not notebook:
        notebook = next((nb.id for nb in notebooks if not nb.closed), "")
        if not notebook:
            print("❌ 错误: 没有打开的笔记本，请使用 --notebook 指定")
            raise CommandError("没有打开的笔记本")

    nb_id, nb_name = _find(notebooks, notebook)

    try:
        result = client.create_daily_note(nb_id)
    except Exception as err:
        print(f"❌ 创建日记失败: {err}")
        raise CommandError(f"创建日记失败: {err}") from err

    print("✅ 日记已创建")
    print(f"   笔记本: {nb_name}")
    print(f"   标题: {_text(result, 'name')}")
    print(f"   路径: {_text(result, 'hPath').removeprefix('/')}")
    return result