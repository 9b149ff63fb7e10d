"""Saving snippets into the favourites notebook."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Mapping

from . import output
from .models import APIError, CommandError

logger = logging.getLogger(__name__)

FAV_NOTEBOOK_NAME = "我的收藏"
FAV_NOTEBOOK_ICON = "⭐"

_TITLE_PATTERN = re.compile(r"#[\t\n\f\r ]+(.+)")
_TITLE_MAX_BYTES = 50


def _text(item: Mapping[str, Any], key: str) -> str:
    value = item.get(key)
    return value if isinstance(value, str) else ""


def extract_title(content: str, now: datetime) -> str:
    """The first ``# `` heading of ``content``, cleaned; else a timestamp from ``now``."""
    for line in content.split("\n"):
        match = _TITLE_PATTERN.fullmatch(line.strip())
        if not match:
            continue
        title = match.group(1).strip()
        if not title:
            continue
        for ch in ("/", "\\", ":"):
            title = title.replace(ch, "-")
        raw = title.encode("utf-8")
        if len(raw) > _TITLE_MAX_BYTES:
            title = raw[:_TITLE_MAX_BYTES].decode("utf-8", errors="ignore") + "..."
        return title
    return now.strftime("%Y-%m-%d %H-%M-%S")


def _report_create_failure(err: Exception) -> None:
    if isinstance(err, APIError):
        print(f"❌ 思源笔记API错误 (code={err.code}): {err.msg}")
        return
    print(f"💡 请手动在思源笔记中创建名为 '{FAV_NOTEBOOK_NAME}' 的笔记本")
    print("\n🔍 错误诊断:")
    print("   - 请确认思源笔记是否正在运行")
    print(f"   - 请确认笔记本名称 '{FAV_NOTEBOOK_NAME}' 是否符合要求")
    print("   - 笔记本名称不能包含特殊字符")


def ensure_fav_notebook(client: Any) -> str:
    """Return the ID of the favourites notebook, creating it when missing."""
    try:
        notebooks = list(client.list_notebooks())
    except Exception as err:
        raise CommandError(f"获取笔记本列表失败: {err}") from err

    for nb in notebooks:
        if nb.name == FAV_NOTEBOOK_NAME:
            return nb.id

    print(f"📝 未找到 '{FAV_NOTEBOOK_NAME}' 笔记本，正在自动创建...")
    try:
        notebook = client.create_notebook_with_icon(FAV_NOTEBOOK_NAME, FAV_NOTEBOOK_ICON)
    except Exception as icon_err:
        logger.warning("创建带图标的笔记本失败，回退到普通创建: %s", icon_err)
        print("⚠️  创建带图标的笔记本失败，将创建普通笔记本")
        print(f"   错误信息: {icon_err}")
        try:
            notebook = client.create_notebook(FAV_NOTEBOOK_NAME)
        except Exception as err:
            logger.error("创建收藏笔记本失败: %s", err)
            print(f"❌ 创建 '{FAV_NOTEBOOK_NAME}' 笔记本失败: {err}")
            _report_create_failure(err)
            raise CommandError(f"创建收藏笔记本失败: {err}") from err

    print(f"✅ 成功创建 '{FAV_NOTEBOOK_NAME}' 笔记本 (ID: {notebook.id})")
    if notebook.icon:
        print(f"🎨 图标: {notebook.icon}")
    return notebook.id


def _read_pipe() -> str:
    try:
        return output.read_pipe_or_file("")
    except (OSError, ValueError) as err:
        print(f"❌ 读取管道内容失败: {err}")
        return ""


def add_to_favorites(
    client: Any, content: str | None = None, now: datetime | None = None
) -> Mapping[str, Any]:
    """Store ``content`` (or piped input when None) as a new favourites document."""
    logger.info("开始添加收藏")
    if content is None:
        content = _read_pipe()
    if not content.strip():
        print("❌ 错误: 没有提供内容")
        print("💡 使用方法:")
        print('   siyuan-cli fav "要收藏的内容"')
        print('   echo "要收藏的内容" | siyuan-cli fav')
        raise CommandError("没有提供内容")

    notebook_id = ensure_fav_notebook(client)

    now = now or datetime.now()
    path = f"/{now:%Y}/{now:%m}"
    title = extract_title(content, now)
    logger.info("生成路径和标题: path=%s title=%s", path, title)

    try:
        result = client.create_doc_with_md(notebook_id, path, content, title)
    except Exception as err:
        logger.error("创建收藏文档失败: %s", err)
        print(f"❌ 创建收藏文档失败: {err}")
        if isinstance(err, APIError):
            print(f"❌ 思源笔记API错误 (code={err.code}): {err.msg}")
        else:
            print("\n🔍 错误诊断:")
            print("   - 请确认思源笔记是否正在运行")
            print("   - 请确认收藏笔记本是否可访问")
            print("   - 请确认内容格式是否正确")
        raise CommandError(f"创建收藏文档失败: {err}") from err

    print("收藏成功")
    output.print_table(
        ["属性", "值"],
        [
            ["笔记本", FAV_NOTEBOOK_NAME],
            ["文档", _text(result, "name")],
            ["路径", _text(result, "hPath")],
            ["时间", now.strftime("%Y-%m-%d %H:%M:%S")],
        ],
    )
    return result