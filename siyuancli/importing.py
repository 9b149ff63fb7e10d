"""Importing Markdown and SiYuan-format files into a notebook."""

from __future__ import annotations

import logging
import os
from typing import Any

from .documents import find_notebook
from .models import CommandError

logger = logging.getLogger(__name__)


def _check_file(file: str, kind: str) -> None:
    if not file.strip():
        print("❌ 错误: 请提供文件或目录路径")
        print(f"💡 使用方法: siyuan-cli import {kind} <文件或目录> --notebook <笔记本>")
        raise CommandError("文件路径不能为空")
    if not os.path.exists(file):
        print(f"❌ 文件或目录不存在: {file}")
        raise FileNotFoundError(file)


def _target(client: Any, notebook: str) -> tuple[str, str]:
    try:
        notebooks = list(client.list_notebooks())
    except Exception as err:
        print(f"❌ 获取笔记本列表失败: {err}")
        raise CommandError(f"获取笔记本列表失败: {err}") from err
    try:
        return find_notebook(notebooks, notebook)
    except CommandError as err:
        print(f"❌ {err}")
        raise


def import_md(client: Any, file: str, notebook: str, dest_path: str = "") -> str:
    """Import Markdown (a ZIP archive when the name ends in ``.zip``); return the notebook name."""
    logger.info("导入 Markdown: file=%s notebook=%s", file, notebook)
    _check_file(file, "md")
    nb_id, nb_name = _target(client, notebook)

    if file.lower().endswith(".zip"):
        try:
            client.import_zip_md(nb_id, dest_path)
        except Exception as err:
            print(f"❌ 导入 ZIP Markdown 失败: {err}")
            raise CommandError(f"导入 ZIP Markdown 失败: {err}") from err
    else:
        try:
            client.import_std_md(nb_id, dest_path)
        except Exception as err:
            print(f"❌ 导入 Markdown 失败: {err}")
            raise CommandError(f"导入 Markdown 失败: {err}") from err

    print(f"✅ 已导入到笔记本 '{nb_name}'")
    return nb_name


def import_sy(client: Any, file: str, notebook: str) -> str:
    """Import SiYuan-format data into a notebook; return the notebook name."""
    logger.info("导入思源格式: file=%s notebook=%s", file, notebook)
    _check_file(file, "sy")
    nb_id, nb_name = _target(client, notebook)

    try:
        client.import_sy(nb_id)
    except Exception as err:
        print(f"❌ 导入思源格式失败: {err}")
        raise CommandError(f"导入思源格式失败: {err}") from err

    print(f"✅ 已导入到笔记本 '{nb_name}'")
    return nb_name