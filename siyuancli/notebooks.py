"""Notebook lookup, listing, opening and closing."""

from __future__ import annotations

import logging
import re
from typing import Any, Sequence

from . import output
from .models import APIError, CommandError, Notebook

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"\d{8,}-\w+", re.ASCII)
_LIST_HINT = "💡 使用 'siyuan-cli notebook list' 查看所有可用的笔记本"


def is_notebook_id(s: str) -> bool:
    """Whether ``s`` looks like a notebook ID (timestamp-random)."""
    if len(s) < 10:
        return False
    return _ID_PATTERN.fullmatch(s) is not None


def _closed_error(nb: Notebook) -> CommandError:
    return CommandError(f"笔记本 '{nb.name}' 已关闭，请先打开笔记本后再操作")


def _accept(nb: Notebook) -> tuple[str, str]:
    if nb.closed:
        raise _closed_error(nb)
    return nb.id, nb.name


def find_notebook(notebooks: Sequence[Notebook], identifier: str) -> tuple[str, str]:
    """Find a notebook by ID or name and return ``(id, name)``."""
    identifier = identifier.strip()

    if is_notebook_id(identifier):
        for nb in notebooks:
            if nb.id == identifier:
                return _accept(nb)
        raise CommandError(f"不存在ID为 '{identifier}' 的笔记本")

    for nb in notebooks:
        if nb.name == identifier:
            return _accept(nb)

    lower = identifier.lower()
    for nb in notebooks:
        if nb.name.lower() == lower:
            return _accept(nb)

    matches = [nb for nb in notebooks if lower in nb.name.lower()]
    if len(matches) == 1:
        return _accept(matches[0])
    if matches:
        print("🔍 找到多个匹配的笔记本：")
        for number, nb in enumerate(matches, 1):
            status = "关闭" if nb.closed else "打开"
            print(f"  {number}. {nb.name} ({nb.id}) - {status}")
        raise CommandError("找到多个匹配的笔记本，请使用更精确的名称或ID")

    raise CommandError(f"不存在名称为 '{identifier}' 的笔记本")


def filter_notebooks(notebooks: Sequence[Notebook], show_closed: bool) -> list[Notebook]:
    """Drop closed notebooks unless ``show_closed`` is set."""
    return [nb for nb in notebooks if show_closed or not nb.closed]


def sort_notebooks(notebooks: Sequence[Notebook], sort_by: str) -> list[Notebook]:
    """Return a sorted copy: by ``id``, ``sort``, or name (the default)."""
    keys = {"id": lambda nb: nb.id, "sort": lambda nb: nb.sort}
    return sorted(notebooks, key=keys.get(sort_by, lambda nb: nb.name))


def _fetch_notebooks(client: Any) -> list[Notebook]:
    try:
        return list(client.list_notebooks())
    except Exception as err:
        logger.error("获取笔记本列表失败: %s", err)
        print(f"❌ 获取笔记本列表失败: {err}")
        raise CommandError(f"获取笔记本列表失败: {err}") from err


def list_notebooks(
    client: Any, show_closed: bool = False, sort_by: str = "name", output_file: str = ""
) -> list[Notebook]:
    """Print the notebooks as a table or JSON and return the ones shown."""
    logger.info("开始获取笔记本列表")
    try:
        notebooks = list(client.list_notebooks())
    except Exception as err:
        logger.error("获取笔记本列表失败: %s", err)
        print(f"❌ 获取笔记本列表失败: {err}")
        print("\n连接诊断:")
        print("  - 请确认思源笔记是否正在运行")
        print("  - 请确认网络连接是否正常")
        raise CommandError(f"获取笔记本列表失败: {err}") from err

    shown = filter_notebooks(notebooks, show_closed)
    if not shown:
        print("暂无笔记本")
        if not show_closed:
            print("提示: 使用 --closed 参数可以查看已关闭的笔记本")
        return []

    shown = sort_notebooks(shown, sort_by)

    if output.is_json():
        items = [
            {"id": nb.id, "name": nb.name, "icon": nb.icon, "sort": nb.sort, "closed": nb.closed}
            for nb in shown
        ]
        data = {"count": len(items), "list": items}
        if output_file:
            output.write_json_file(data, output_file)
        else:
            output.print_json(data)
        return shown

    rows = [
        [output.truncate(nb.name, 30), nb.id, nb.icon, "已关闭" if nb.closed else "已打开", str(nb.sort)]
        for nb in shown
    ]
    output.print_table_right(["名称", "ID", "图标", "状态", "排序"], rows, 5)
    print(f"\n共 {len(shown)} 个笔记本")
    return shown


def _resolve(client: Any, identifier: str, usage: str) -> tuple[list[Notebook], str, str]:
    if identifier == "":
        print("❌ 错误: 笔记本标识符不能为空")
        print(f"💡 使用方法: siyuan-cli notebook {usage} <笔记本名称或ID>")
        print("💡 使用 'siyuan-cli notebook list' 查看可用的笔记本")
        raise CommandError("笔记本标识符不能为空")
    notebooks = _fetch_notebooks(client)
    try:
        nb_id, name = find_notebook(notebooks, identifier)
    except CommandError as err:
        print(f"❌ {err}")
        print(_LIST_HINT)
        raise
    return notebooks, nb_id, name


def _report_failure(err: Exception, action: str, name: str, nb_id: str) -> None:
    if isinstance(err, APIError):
        print(f"❌ 思源笔记API错误 (code={err.code}): {err.msg}")
        return
    print(f"❌ {action}失败: {err}")
    print("\n🔍 错误诊断:")
    print("   - 请确认思源笔记是否正在运行")
    print(f"   - 请确认笔记本 '{name}' ({nb_id}) 是否存在")


def open_notebook(client: Any, identifier: str) -> bool:
    """Open a notebook; return False if it was already open."""
    logger.info("开始打开笔记本: %s", identifier)
    notebooks, nb_id, name = _resolve(client, identifier, "open")

    if any(nb.id == nb_id and not nb.closed for nb in notebooks):
        print(f"📂 笔记本 '{name}' 已经打开")
        return False

    try:
        client.open_notebook(nb_id)
    except Exception as err:
        logger.error("打开笔记本失败: %s", err)
        _report_failure(err, "打开笔记本", name, nb_id)
        raise CommandError(f"打开笔记本失败: {err}") from err

    print(f"✅ 成功打开笔记本: {name} ({nb_id})")
    return True


def close_notebook(client: Any, identifier: str) -> bool:
    """Close a notebook; return False if it was already closed."""
    logger.info("开始关闭笔记本: %s", identifier)
    notebooks, nb_id, name = _resolve(client, identifier, "close")

    if any(nb.id == nb_id and nb.closed for nb in notebooks):
        print(f"📁 笔记本 '{name}' 已经关闭")
        return False

    try:
        client.close_notebook(nb_id)
    except Exception as err:
        logger.error("关闭笔记本失败: %s", err)
        _report_failure(err, "关闭笔记本", name, nb_id)
        raise CommandError(f"关闭笔记本失败: {err}") from err

    print(f"✅ 成功关闭笔记本: {name} ({nb_id})")
    return True