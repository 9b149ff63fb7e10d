"""Block inspection and editing: get, source, update, append and delete."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from . import output
from .documents import doc_id_from_resolved, find_notebook, resolve_doc_path
from .models import CommandError

logger = logging.getLogger(__name__)

_BLOCK_TYPE_LABELS = {
    "d": "文档",
    "h": "标题",
    "p": "段落",
    "NodeDocument": "文档",
    "NodeHeading": "标题",
    "NodeParagraph": "段落",
    "NodeList": "列表",
    "NodeListItem": "列表项",
    "NodeBlockquote": "引用",
    "NodeCodeBlock": "代码块",
    "NodeTable": "表格",
    "NodeHR": "分隔线",
    "NodeSuperBlock": "超级块",
    "NodeIFrame": "嵌入块",
    "NodeWidget": "挂件块",
    "NodeAudio": "音频",
    "NodeVideo": "视频",
}


def block_type_label(t: str) -> str:
    """A readable label for a block type, or the type itself if unknown."""
    return _BLOCK_TYPE_LABELS.get(t, t)


def format_block_time(s: str) -> str:
    """Format a ``YYYYMMDDhhmmss`` stamp as ``YYYY-MM-DD hh:mm:ss``; other text is kept."""
    if len(s) != 14:
        return s
    return f"{s[0:4]}-{s[4:6]}-{s[6:8]} {s[8:10]}:{s[10:12]}:{s[12:14]}"


def _str_field(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    return value if isinstance(value, str) else ""


def _require_id(block_id: str, usage: str) -> None:
    if not block_id.strip():
        print("❌ 错误: 请提供块 ID")
        print(f"💡 使用方法: siyuan-cli block {usage}")
        raise CommandError("块 ID 不能为空")


def _emit_json(data: Any, output_file: str) -> None:
    if output_file:
        output.write_json_file(data, output_file)
    else:
        output.print_json(data)


def resolve_doc_id(client: Any, notebook: str, path: str) -> str:
    """The ID of the document at ``path`` in the notebook named or identified by ``notebook``."""
    try:
        notebooks = list(client.list_notebooks())
    except Exception as err:
        raise CommandError(f"获取笔记本列表失败: {err}") from err
    nb_id, nb_name = find_notebook(notebooks, notebook)
    return doc_id_from_resolved(resolve_doc_path(client, nb_id, nb_name, path))


def get_block(client: Any, block_id: str, output_file: str = "") -> dict[str, Any]:
    """Look a block up with SQL, print its details and return the row."""
    logger.info("获取块信息: %s", block_id)
    _require_id(block_id, "get <block-id>")

    quoted = block_id.replace("'", "''")
    stmt = (
        "SELECT b.id, b.type, b.content, b.created, b.updated, b.root_id, d.hpath "
        f"FROM blocks b LEFT JOIN blocks d ON b.root_id = d.id WHERE b.id = '{quoted}' LIMIT 1"
    )
    try:
        rows = list(client.query_sql(stmt))
    except Exception as err:
        print(f"❌ 获取块信息失败: {err}")
        raise CommandError(f"获取块信息失败: {err}") from err
    if not rows:
        print(f"❌ 未找到块: {block_id}")
        raise CommandError("块不存在")

    row = dict(rows[0])
    if output.is_json() or output_file:
        _emit_json(row, output_file)
        return row

    content = _str_field(row, "content").replace("\n", " ")
    print(f"块 ID: {_str_field(row, 'id')}")
    print(f"类型: {block_type_label(_str_field(row, 'type'))}")
    print(f"内容: {output.truncate(content, 80)}")
    print(f"文档: {_str_field(row, 'hpath')}")
    print(f"创建: {format_block_time(_str_field(row, 'created'))}")
    print(f"更新: {format_block_time(_str_field(row, 'updated'))}")
    return row


def get_block_source(client: Any, block_id: str, output_file: str = "") -> str:
    """Print and return the kramdown source of a block."""
    logger.info("获取块源码: %s", block_id)
    _require_id(block_id, "source <block-id>")

    try:
        kramdown = client.get_block_kramdown(block_id)
    except Exception as err:
        print(f"❌ 获取块源码失败: {err}")
        raise CommandError(f"获取块源码失败: {err}") from err

    if output.is_json() or output_file:
        _emit_json({"id": block_id, "kramdown": kramdown}, output_file)
    else:
        print(kramdown)
    return kramdown


def update_block(client: Any, block_id: str, content: str) -> None:
    """Replace the content of a block with Markdown."""
    logger.info("更新块: %s", block_id)
    _require_id(block_id, 'update <block-id> --content "新内容"')
    if not content.strip():
        print("❌ 错误: 请提供新内容")
        print("💡 使用 --content 指定新内容，或通过管道传入")
        raise CommandError("内容不能为空")

    try:
        client.update_block(block_id, data_type="markdown", data=content)
    except Exception as err:
        print(f"❌ 更新块失败: {err}")
        raise CommandError(f"更新块失败: {err}") from err
    print(f"✅ 块 {block_id} 已更新")


def append_block(
    client: Any,
    content: str,
    doc_id: str = "",
    notebook: str = "",
    path: str = "",
    data_type: str = "",
) -> str:
    """Append content to a document given by ID or by notebook and path; return the new block ID."""
    logger.info("追加块: doc=%s notebook=%s path=%s", doc_id, notebook, path)
    if not content.strip():
        print("❌ 错误: 请提供内容")
        print("💡 使用 --content 指定内容，或通过管道传入")
        raise CommandError("内容不能为空")
    data_type = data_type or "markdown"

    if not doc_id:
        if not (notebook and path):
            print("❌ 错误: 请提供文档 ID 或 笔记本/文档路径")
            print('💡 使用方法: siyuan-cli block append <doc-id> --content "内容"')
            print('   或: siyuan-cli block append <笔记本/文档路径> --content "内容"')
            raise CommandError("请提供文档 ID 或 笔记本/文档路径")
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

    try:
        new_id = client.append_block(doc_id, data_type=data_type, data=content)
    except Exception as err:
        print(f"❌ 追加块失败: {err}")
        raise CommandError(f"追加块失败: {err}") from err
    print(f"✅ 已追加内容（新块 ID: {new_id}）")
    return new_id


def delete_block(client: Any, block_id: str) -> None:
    """Delete a block."""
    logger.info("删除块: %s", block_id)
    _require_id(block_id, "delete <block-id>")
    try:
        client.delete_block(block_id)
    except Exception as err:
        print(f"❌ 删除块失败: {err}")
        raise CommandError(f"删除块失败: {err}") from err
    print(f"✅ 块 {block_id} 已删除")