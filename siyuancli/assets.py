"""Asset upload, listing and cleanup."""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping

from . import output
from .blocks import resolve_doc_id
from .models import CommandError

logger = logging.getLogger(__name__)

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024


def format_size(size: int) -> str:
    """A human-readable size in B, KB, MB or GB."""
    if size >= _GB:
        return f"{size / _GB:.1f} GB"
    if size >= _MB:
        return f"{size / _MB:.1f} MB"
    if size >= _KB:
        return f"{size / _KB:.1f} KB"
    return f"{size} B"


def _text(item: Mapping[str, Any], key: str) -> str:
    value = item.get(key)
    return "" if value is None else str(value)


def _size(item: Mapping[str, Any]) -> int:
    value = item.get("size") or 0
    return int(value)


def _emit_json(data: Any, output_file: str) -> None:
    if output_file:
        output.write_json_file(data, output_file)
    else:
        output.print_json(data)


def upload_asset(client: Any, file_path: str) -> str:
    """Upload a file as an asset and return where the server stored it."""
    logger.info("上传资源文件: %s", file_path)
    if not file_path.strip():
        print("❌ 错误: 请提供文件路径")
        print("💡 使用方法: siyuan-cli asset upload <文件路径>")
        raise CommandError("文件路径不能为空")
    if not os.path.exists(file_path):
        print(f"❌ 文件不存在: {file_path}")
        raise FileNotFoundError(file_path)

    try:
        result = client.upload_asset(file_path)
    except Exception as err:
        print(f"❌ 上传失败: {err}")
        raise CommandError(f"上传失败: {err}") from err
    print(f"✅ 文件已上传: {result}")
    return result


def list_assets(
    client: Any, doc_id: str = "", notebook: str = "", path: str = "", output_file: str = ""
) -> list[Mapping[str, Any]]:
    """Show the assets a document uses; without a document print the usage."""
    logger.info("列出文档资源: doc=%s notebook=%s path=%s", doc_id, notebook, path)
    if not doc_id:
        if not (notebook and path):
            print("💡 请指定文档以查看其关联资源")
            print("   siyuan-cli asset list <doc-id>")
            print("   siyuan-cli asset list <笔记本> <文档路径>")
            print("   siyuan-cli asset unused  # 查看未使用资源")
            return []
        try:
            doc_id = resolve_doc_id(client, notebook, path)
        except CommandError as err:
            print(f"❌ {err}")
            raise

    try:
        assets = list(client.get_doc_assets(doc_id))
    except Exception as err:
        print(f"❌ 获取文档资源失败: {err}")
        raise CommandError(f"获取文档资源失败: {err}") from err

    if output.is_json() or output_file:
        _emit_json(assets, output_file)
        return assets

    if not assets:
        print("该文档没有关联资源文件")
        return assets

    print(f"共 {len(assets)} 个资源文件:\n")
    rows = [
        [_text(a, "name"), _text(a, "type"), format_size(_size(a)), _text(a, "updated")]
        for a in assets
    ]
    output.print_table(["名称", "类型", "大小", "更新时间"], rows)
    return assets


def list_unused_assets(client: Any, output_file: str = "") -> list[Mapping[str, Any]]:
    """Show assets no document refers to."""
    logger.info("列出未使用资源")
    try:
        assets = list(client.get_unused_assets())
    except Exception as err:
        print(f"❌ 获取未使用资源失败: {err}")
        raise CommandError(f"获取未使用资源失败: {err}") from err

    if output.is_json() or output_file:
        _emit_json(assets, output_file)
        return assets

    if not assets:
        print("没有未使用的资源文件")
        return assets

    print(f"共 {len(assets)} 个未使用资源文件:\n")
    rows = [[_text(a, "path"), format_size(_size(a)), _text(a, "updated")] for a in assets]
    output.print_table(["路径", "大小", "更新时间"], rows)
    return assets


def clean_unused_assets(client: Any, force: bool = False) -> None:
    """Remove every unused asset on the server."""
    logger.info("清理未使用资源: force=%s", force)
    try:
        client.remove_unused_assets()
    except Exception as err:
        print(f"❌ 清理失败: {err}")
        raise CommandError(f"清理失败: {err}") from err
    print("✅ 未使用资源已清理")