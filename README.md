# siyuancli

`siyuancli` holds the everyday operations of a client for a SiYuan note
server: listing, opening and closing notebooks, browsing the document tree and
outlines, reading and editing blocks, full-text search, tagging documents,
managing assets, checking and running sync, raw SQL queries, document history
and rollback, copying and moving documents, daily notes, favourites, and
exporting or importing Markdown.

Every operation takes a `client` object as its first argument. The functions
here check their arguments, resolve notebook names and document paths, call
the client, and print the result as a table or as JSON; most also return what
they printed.

Problems are reported by raising `siyuancli.models.CommandError` (a missing
file raises `FileNotFoundError`). A client should raise
`siyuancli.models.APIError(code, msg)` when the server answers with a non-zero
code; several operations print that code and message.

## The client

The package does not talk HTTP itself. You pass in an object with the methods
that the operations you use call, for example:

- `list_notebooks()` – a list of `siyuancli.models.Notebook`
  (`id`, `name`, `icon`, `sort`, `closed`)
- `open_notebook(id)`, `close_notebook(id)`
- `query_sql(stmt)` – a list of row mappings
- `get_ids_by_hpath(notebook_id, hpath)` – a list of document IDs
- `list_doc_tree(notebook_id, path, sort)` – a list of
  `siyuancli.documents.DocTreeNode`
- `get_doc_outline(doc_id)` – mappings with `depth`, `level` and `content`
- `get_block_kramdown(id)`, `update_block(id, data_type=..., data=...)`,
  `append_block(parent_id, data_type=..., data=...)`, `delete_block(id)`
- `full_text_search_block(query)`, `search_docs(keyword)`, `search_tag(keyword)`
- `get_block_attrs(id)`, `set_block_attrs(id, attrs)`
- `upload_asset(path)`, `get_doc_assets(doc_id)`, `get_unused_assets()`,
  `remove_unused_assets()`
- `get_sync_info()`, `perform_sync()`
- `export_md_content(doc_id)` – `(markdown, hpath)`; `export_html(doc_id)`,
  `export_docx(doc_id)`
- `search_history(query, notebook, page)`,
  `get_history_items(created, query, notebook)`,
  `rollback_doc_history(notebook_id, history_path)`
- `duplicate_doc(doc_id)`, `move_docs(from_paths, to_notebook, to_path)`,
  `create_daily_note(notebook_id)`
- `create_notebook(name)`, `create_notebook_with_icon(name, icon)`,
  `create_doc_with_md(notebook_id, path, markdown, title)`
- `import_std_md(notebook_id, path)`, `import_zip_md(notebook_id, path)`,
  `import_sy(notebook_id)`

## Output format

Output is a borderless text table by default. Switch the process to JSON with

```python
from siyuancli.output import set_format

set_format("json")
```

Operations that take an `output_file` write indented JSON to that file,
creating its directory when needed, whatever the global format is.
`siyuancli.output.render_table` returns a table as a string.

## Notebooks and documents

```python
from siyuancli.notebooks import list_notebooks, open_notebook, close_notebook
from siyuancli.documents import list_documents, get_document_outline

list_notebooks(client, show_closed=False, sort_by="name", output_file="")
open_notebook(client, "日记")
list_documents(client, "日记", "/2024", 0, 2, "")
get_document_outline(client, "", "日记", "/2024/一月")
```

A notebook can be named by its ID, its exact name, its name in any letter case,
or a part of its name. A closed notebook is refused with a message telling you
to open it first.

Document paths are readable paths such as `/项目文档/API文档`; a path that
starts with the notebook's own name (as copied from the SiYuan interface) is
accepted too, and so is a bare document ID. `list_documents` accepts a sort
mode from 0 to 3 and a depth, where 0 draws every level.

## Blocks, search and tags

```python
from siyuancli.blocks import get_block, append_block, update_block, delete_block
from siyuancli.search import search_doc, search_block
from siyuancli.tags import add_tags, remove_tag, search_tags

get_block(client, "20240101120000-abcdefg", "")
append_block(client, "- 新的一条", "", "日记", "/2024/一月", "markdown")
search_doc(client, "三体", "", 20, "")
add_tags(client, ["读书", "科幻"], "20240101120000-abcdefg", "", "")
```

## Assets, sync and queries

```python
from siyuancli.assets import list_assets, list_unused_assets, clean_unused_assets
from siyuancli.syncing import sync_status, sync_now
from siyuancli.query import run_query

list_unused_assets(client, "")
sync_status(client)
run_query(client, "SELECT id, hpath FROM blocks WHERE type = 'd' LIMIT 10", "", False)
```

## Reading, history, moving and daily notes

```python
from siyuancli.docops import (
    get_document, get_document_history, rollback_document,
    copy_document, move_document, create_daily_note,
)

get_document(client, "日记", "/2024/一月", "")
move_document(client, "日记", "/2024/一月", "归档:/2024")
create_daily_note(client, "")
```

The target of `move_document` may be `notebook:/path`, a notebook on its own
(its root), or a path in the source notebook. `create_daily_note` uses the
first open notebook when none is given. `get_document` prints the Markdown as
it is, without rendering.

## Favourites, export and import

```python
from siyuancli.favorites import add_to_favorites
from siyuancli.exporting import export_doc
from siyuancli.importing import import_md, import_sy

add_to_favorites(client, "# 好文章\n内容……", None)
export_doc(client, "", "日记", "/2024/一月", "md", "out/一月.md")
import_md(client, "notes.zip", "日记", "/")
```

Favourites go into a notebook called `我的收藏`, created on first use, under a
`/YYYY/MM` folder; the title is the first `# ` heading or, failing that, the
current time. With `content=None` piped standard input is read. `export_doc`
writes `md` and `html` to a file (by default `<doc-id>.md` or `.html`); `docx`
is left in the server's export directory.

## Configuration data

`siyuancli.models.AppConfig` with its `ai`, `log`, `siyuan` and `output`
sections describes the application settings; `config_from_dict` and
`config_to_dict` convert it from and to a mapping laid out like the YAML
settings file.

## Small helpers

```python
from siyuancli.output import truncate
from siyuancli.assets import format_size
from siyuancli.blocks import format_block_time
from siyuancli.search import doc_title

truncate("hello world", 5)                  # 'hell…'
format_size(2048)                           # '2.0 KB'
format_block_time("20240102030405")         # '2024-01-02 03:04:05'
doc_title("", "编程/读书笔记/三体")           # '三体'
```

## What is not included

- No HTTP client for the SiYuan API: you supply the `client`.
- No command-line program or entry point; the functions are called from Python.
- No reading or writing of the settings file itself, and no logging setup.
- No creating, renaming or deleting of notebooks, no creating, renaming or
  deleting of documents, no exporting of whole notebooks, and no listing of
  all tags.
- No interactive screens and no rendered Markdown display.