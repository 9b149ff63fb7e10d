"""Document trees: name lookup, path resolution, listing and outlines."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, MutableMapping, Sequence

from . import output
from .models import APIError, CommandError, Notebook

logger = logging.getLogger(__name__)

_CONTENT_BATCH = 64
_LIST_HINT = "💡 使用 'siyuan-cli notebook list' 查看所有可用的笔记本"


@dataclass
class DocTreeNode:
    """A node of the document tree as returned by the server."""

    id: str
    name: str = ""
    children: list[DocTreeNode] = field(default_factory=list)


@dataclass
class TreeNodeDisplay:
    """A tree node prepared for JSON output."""

    id: str
    name: str
    children: list[TreeNodeDisplay] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Mapping for JSON; ``children`` is left out when empty."""
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def _sql_quote(value: str) -> str:
    return value.replace("'", "''")


def _str_field(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    return value if isinstance(value, str) else ""


def looks_like_id(s: str) -> bool:
    """Whether ``s`` looks like an ID or a date rather than a readable name."""
    return all(c in "0123456789-" for c in s)


def extract_title(content: str) -> str:
    """The text of the first ``#`` heading line in ``content``, or ``""``."""
    for line in content.split("\n"):
        line = line.strip()
        if line.startswith("#"):
            title = line.lstrip("# ").strip()
            if title:
                return title
    return ""


def build_name_map_from_sql(client: Any, notebook_id: str) -> dict[str, str]:
    """Map document IDs to display names using the documents' hpaths."""
    # Without an explicit LIMIT the server returns only 64 rows.
    stmt = (
        "SELECT id, hpath FROM blocks WHERE type = 'd' "
        f"AND box = '{_sql_quote(notebook_id)}' LIMIT 10000"
    )
    try:
        rows = client.query_sql(stmt)
    except Exception as err:
        raise CommandError(f"SQL查询hpath失败: {err}") from err

    name_map: dict[str, str] = {}
    need_content: list[str] = []
    for row in rows:
        doc_id = _str_field(row, "id")
        if not doc_id:
            continue
        hpath = _str_field(row, "hpath")
        name = doc_id
        if hpath:
            last = hpath.strip("/").split("/")[-1]
            if last:
                name = last
        if looks_like_id(name):
            need_content.append(doc_id)
        name_map[doc_id] = name

    if need_content:
        fill_names_from_content(client, need_content, name_map)
    return name_map


def fill_names_from_content(
    client: Any, ids: Sequence[str], name_map: MutableMapping[str, str]
) -> None:
    """Replace names of ``ids`` with the heading found in their content."""
    for start in range(0, len(ids), _CONTENT_BATCH):
        batch = ids[start : start + _CONTENT_BATCH]
        quoted = ",".join(f"'{_sql_quote(doc_id)}'" for doc_id in batch)
        stmt = f"SELECT id, content FROM blocks WHERE id IN ({quoted})"
        try:
            rows = client.query_sql(stmt)
        except Exception as err:
            logger.warning("查询文档内容失败: %s", err)
            continue
        for row in rows:
            doc_id = _str_field(row, "id")
            content = _str_field(row, "content")
            if not doc_id or not content:
                continue
            title = extract_title(content)
            if title:
                name_map[doc_id] = title


def _collect_names(nodes: Iterable[DocTreeNode], parent: str, name_map: dict[str, str]) -> None:
    for node in nodes:
        if node.name:
            hpath = node.name
        elif parent:
            hpath = f"{parent}/{node.id[:8]}"
        else:
            hpath = node.id[:8]
        name_map[node.id] = hpath
        if node.children:
            _collect_names(node.children, hpath, name_map)


def build_name_map_from_tree(tree: Iterable[DocTreeNode]) -> dict[str, str]:
    """Map document IDs to names taken from the tree itself."""
    name_map: dict[str, str] = {}
    _collect_names(tree, "", name_map)
    return name_map


def is_doc_id(s: str) -> bool:
    """Whether the first segment of ``s`` looks like a document ID."""
    first = s.strip("/").split("/", 1)[0]
    size = len(first.encode("utf-8"))
    return 14 <= size <= 24 and "-" in first


def _accept(nb: Notebook) -> tuple[str, str]:
    if nb.closed:
        raise CommandError(f"笔记本 '{nb.name}' 已关闭，请先打开笔记本后再操作")
    return nb.id, nb.name


def find_notebook(notebooks: Sequence[Notebook], identifier: str) -> tuple[str, str]:
    """Find a notebook by ID, exact name or partial name; return ``(id, name)``."""
    if len(identifier) >= 14 and "-" in identifier:
        for nb in notebooks:
            if nb.id == identifier:
                return _accept(nb)

    folded = identifier.casefold()
    exact = [nb for nb in notebooks if nb.name.casefold() == folded]
    if len(exact) == 1:
        return _accept(exact[0])
    if exact:
        names = "\n".join(f"  {nb.name} ({nb.id})" for nb in exact)
        raise CommandError(f"找到多个匹配的笔记本：\n{names}\n\n请使用更具体的名称或ID")

    lower = identifier.lower()
    for nb in notebooks:
        if lower in nb.name.lower():
            return _accept(nb)

    raise CommandError(f"未找到匹配的笔记本: {identifier}")


def _with_slash(path: str) -> str:
    return path if path.endswith("/") else path + "/"


def resolve_doc_path(client: Any, notebook_id: str, notebook_name: str, path: str) -> str:
    """Turn a readable path or a document ID into an ID path ending in ``/``."""
    if path in ("", "/"):
        return "/"

    if is_doc_id(path):
        return _with_slash("/" + path)

    parts = path.strip("/").split("/")
    # A path copied from the UI starts with the notebook name.
    start = 1 if len(parts) > 1 and notebook_name and parts[0].casefold() == notebook_name.casefold() else 0
    segments = parts[start:]

    try:
        ids = client.get_ids_by_hpath(notebook_id, "/" + "/".join(segments))
    except Exception as err:
        logger.debug("完整路径解析失败: %s", err)
        ids = None
    if ids:
        return _with_slash("/" + ids[-1])

    id_path = []
    for end in range(1, len(segments) + 1):
        seg_path = "/" + "/".join(segments[:end])
        try:
            ids = client.get_ids_by_hpath(notebook_id, seg_path)
        except Exception as err:
            raise CommandError(f"未找到文档路径 '{seg_path}': {err}") from err
        if not ids:
            raise CommandError(f"未找到文档路径 '{seg_path}'")
        id_path.append(ids[-1])

    if not id_path:
        raise CommandError(f"未找到文档路径 '{path}'")
    return _with_slash("/" + "/".join(id_path))


def doc_id_from_resolved(resolved_path: str) -> str:
    """The last ID of a resolved ID path."""
    return resolved_path.strip("/").split("/")[-1]


def convert_to_display_tree(
    nodes: Iterable[DocTreeNode], name_map: Mapping[str, str]
) -> list[TreeNodeDisplay]:
    """Build display nodes carrying the names from ``name_map``."""
    return [
        TreeNodeDisplay(
            id=node.id,
            name=name_map.get(node.id, ""),
            children=convert_to_display_tree(node.children, name_map) if node.children else [],
        )
        for node in nodes
    ]


def count_nodes(nodes: Iterable[DocTreeNode]) -> int:
    """The number of nodes in the tree, all levels counted."""
    return sum(1 + count_nodes(node.children) for node in nodes)


def render_tree(
    nodes: Sequence[DocTreeNode], name_map: Mapping[str, str], depth: int = 0
) -> tuple[list[str], int, int]:
    """Draw the tree; return its lines and the numbers of documents and folders shown.

    ``depth`` limits the levels drawn; 0 means no limit.
    """
    lines: list[str] = []
    totals = [0, 0]

    def walk(level: Sequence[DocTreeNode], prefix: str, depth: int) -> None:
        for index, node in enumerate(level):
            last = index == len(level) - 1
            connector = "└── " if last else "├── "
            child_prefix = "    " if last else "│   "
            name = name_map.get(node.id, "")
            if node.children:
                icon, suffix = "📂 ", f" ({len(node.children)})"
                totals[1] += 1
            else:
                icon, suffix = "📄 ", ""
                totals[0] += 1
            lines.append(f"{prefix}{connector}{icon}{name}{suffix}  {node.id}")
            if node.children and depth != 1:
                walk(node.children, prefix + child_prefix, depth - 1 if depth > 1 else depth)

    walk(nodes, "", depth)
    return lines, totals[0], totals[1]


def _fetch_and_find(client: Any, identifier: str) -> tuple[str, str]:
    try:
        notebooks = list(client.list_notebooks())
    except Exception as err:
        print(f"❌ 获取笔记本列表失败: {err}")
        raise CommandError(f"获取笔记本列表失败: {err}") from err
    try:
        return find_notebook(notebooks, identifier)
    except CommandError as err:
        print(f"❌ {err}")
        print(_LIST_HINT)
        raise


def _resolve_printing(client: Any, nb_id: str, nb_name: str, path: str) -> str:
    try:
        return resolve_doc_path(client, nb_id, nb_name, path)
    except CommandError as err:
        print(f"❌ {err}")
        raise


def list_documents(
    client: Any,
    notebook: str,
    path: str = "",
    sort: int = 0,
    depth: int = 0,
    output_file: str = "",
) -> list[TreeNodeDisplay]:
    """Show the document tree of a notebook as a drawing or JSON."""
    logger.info("开始列出文档树: notebook=%s path=%s sort=%d depth=%d", notebook, path, sort, depth)

    if not notebook.strip():
        print("❌ 错误: 笔记本标识符不能为空")
        print("💡 使用方法: siyuan-cli document list <笔记本名称或ID>")
        print("💡 使用 'siyuan-cli notebook list' 查看可用的笔记本")
        raise CommandError("笔记本标识符不能为空")

    if output_file and not output.is_json():
        print("⚠️  警告: 导出到文件时强制使用JSON格式")

    if not 0 <= sort <= 3:
        message = f"无效的排序方式: {sort}"
        print(f"❌ 错误: {message}")
        raise CommandError(message)

    nb_id, nb_name = _fetch_and_find(client, notebook)
    resolved = _resolve_printing(client, nb_id, nb_name, path)

    try:
        tree = list(client.list_doc_tree(nb_id, resolved, sort))
    except APIError as err:
        if err.code == -1 and path:
            print(f"'{path}' 是一个文档，不是目录，无法列出子内容")
            print("💡 提示: 使用上级目录路径查看子内容")
            return []
        print(f"❌ 获取文档树失败: {err}")
        print(f"❌ 思源笔记API错误 (code={err.code}): {err.msg}")
        raise CommandError(f"获取文档树失败: {err}") from err
    except Exception as err:
        print(f"❌ 获取文档树失败: {err}")
        raise CommandError(f"获取文档树失败: {err}") from err

    try:
        name_map = build_name_map_from_sql(client, nb_id)
    except CommandError as err:
        logger.warning("SQL查询hpath失败，回退到tree name: %s", err)
        name_map = build_name_map_from_tree(tree)

    display = convert_to_display_tree(tree, name_map)

    if output.is_json() or output_file:
        data = {
            "notebook": nb_name,
            "tree": [node.to_dict() for node in display],
            "statistics": {"totalNodes": count_nodes(tree)},
        }
        if output_file:
            output.write_json_file(data, output_file)
        else:
            output.print_json(data)
        return display

    if not tree:
        print("暂无文档")
        return display

    lines, docs, dirs = render_tree(tree, name_map, depth)
    for line in lines:
        print(line)
    print(f"\n笔记本: {nb_name}  |  {docs} 个文档, {dirs} 个目录")
    return display


def get_document_outline(
    client: Any, doc_id: str = "", notebook: str = "", path: str = ""
) -> list[str]:
    """Print the heading outline of a document and return its lines."""
    logger.info("获取文档大纲: doc=%s notebook=%s path=%s", doc_id, notebook, path)

    if not doc_id:
        if not path.strip():
            print("❌ 错误: 请提供文档路径")
            print("💡 使用方法: siyuan-cli document outline <笔记本> <文档路径>")
            raise CommandError("文档路径不能为空")
        nb_id, nb_name = _fetch_and_find(client, notebook)
        doc_id = doc_id_from_resolved(_resolve_printing(client, nb_id, nb_name, path))

    try:
        outline = list(client.get_doc_outline(doc_id))
    except Exception as err:
        print(f"❌ 获取大纲失败: {err}")
        raise CommandError(f"获取大纲失败: {err}") from err

    if not outline:
        print("该文档没有大纲（无标题）")
        return []

    lines = [
        "  " * item["depth"] + "#" * item["level"] + " " + str(item["content"]).replace("\n", " ")
        for item in outline
    ]
    print("文档大纲:")
    for line in lines:
        print(line)
    return lines