"""Sync status and manual synchronisation."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from . import output
from .assets import format_size
from .models import CommandError

logger = logging.getLogger(__name__)


def sync_status(client: Any) -> Mapping[str, Any]:
    """Print the sync information and return it."""
    logger.info("获取同步状态")
    try:
        info = client.get_sync_info()
    except Exception as err:
        print(f"❌ 获取同步信息失败: {err}")
        raise CommandError(f"获取同步信息失败: {err}") from err

    if output.is_json():
        output.print_json(info)
        return info

    print("同步状态:")
    print(f"  已同步文件: {info.get('synced', 0)}")
    print(f"  冲突文件: {info.get('conflict', 0)}")
    print(f"  同步大小: {format_size(int(info.get('syncSize') or 0))}")
    print(f"  最后同步: {info.get('lastSync', '')}")
    return info


def sync_now(client: Any) -> None:
    """Run a synchronisation now."""
    logger.info("执行同步")
    print("正在同步...")
    try:
        client.perform_sync()
    except Exception as err:
        print(f"❌ 同步失败: {err}")
        raise CommandError(f"同步失败: {err}") from err
    print("✅ 同步完成")