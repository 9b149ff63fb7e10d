import json

import pytest

from siyuancli import docops, output
from siyuancli.models import CommandError, Notebook

WORK_ID = "20240101000000-work001"
OTHER_ID = "20240101000000-other01"
CLOSED_ID = "20240101000000-closed1"
DOC_ID = "20240102000000-doc0001"


class FakeClient:
    def __init__(self, notebooks=None, hpaths=None):
        self.notebooks = notebooks if notebooks is not None else [
            Notebook(id=WORK_ID, name="Work"),
            Notebook(id=OTHER_ID, name="Other"),
        ]
        self.hpaths = hpaths or {}
        self.calls = []
        self.sql_rows = []
        self.sql_error = None
        self.history = {"histories": [], "pageCount": 0, "totalCount": 0}
        self.history_items = []

    def list_notebooks(self):
        return self.notebooks

    def get_ids_by_hpath(self, notebook_id, path):
        return self.hpaths.get((notebook_id, path), [])

    def query_sql(self, stmt):
        self.calls.append(("sql", stmt))
        if self.sql_error:
            raise self.sql_error
        return self.sql_rows

    def export_md_content(self, doc_id):
        self.calls.append(("export", doc_id))
        return "# Hello\n", "/Guide"

    def search_history(self, query, notebook, page):
        self.calls.append(("search_history", query, notebook, page))
        return self.history

    def get_history_items(self, created, query, notebook):
        self.calls.append(("items", created, query, notebook))
        return self.history_items

    def rollback_doc_history(self, notebook_id, history_path):
        self.calls.append(("rollback", notebook_id, history_path))

    def duplicate_doc(self, doc_id):
        self.calls.append(("duplicate", doc_id))

    def move_docs(self, from_paths, to_notebook, to_path):
        self.calls.append(("move", from_paths, to_notebook, to_path))

    def create_daily_note(self, notebook_id):
        self.calls.append(("daily", notebook_id))
        return {"name": "2024-01-02", "hPath": "/daily/2024-01-02"}


@pytest.fixture(autouse=True)
def table_format():
    output.set_format("")
    yield
    output.set_format("")


def test_format_doc_time_formats_stamp():
    assert docops.format_doc_time("20240102030405") == "2024-01-02 03:04:05"


def test_format_doc_time_keeps_other_text():
    assert docops.format_doc_time("2024") == "2024"
    assert docops.format_doc_time("") == ""


def test_get_block_meta_reads_row():
    client = FakeClient()
    client.sql_rows = [{"created": "20240101000000", "updated": "20240102000000"}]
    meta = docops.get_block_meta(client, DOC_ID)
    assert meta == {"created": "20240101000000", "updated": "20240102000000"}
    assert DOC_ID in client.calls[0][1]


def test_get_block_meta_none_when_empty_or_failing():
    client = FakeClient()
    assert docops.get_block_meta(client, DOC_ID) is None
    client.sql_error = RuntimeError("down")
    assert docops.get_block_meta(client, DOC_ID) is None


def test_get_document_writes_json(tmp_path):
    client = FakeClient(hpaths={(WORK_ID, "/Guide"): [DOC_ID]})
    client.sql_rows = [{"created": "c", "updated": "u"}]
    target = tmp_path / "out" / "doc.json"
    data = docops.get_document(client, "Work", "Guide", str(target))
    written = json.loads(target.read_text(encoding="utf-8"))
    assert written == data
    assert written["id"] == DOC_ID
    assert written["content"] == "# Hello\n"
    assert written["created"] == "c"
    assert ("export", DOC_ID) in client.calls


def test_get_document_prints_detail(capsys):
    client = FakeClient(hpaths={(WORK_ID, "/Guide"): [DOC_ID]})
    data = docops.get_document(client, "Work", "/Guide")
    out = capsys.readouterr().out
    assert DOC_ID in out
    assert "# Hello" in out
    assert "created" not in data


def test_get_document_requires_notebook_and_path():
    with pytest.raises(CommandError):
        docops.get_document(FakeClient(), "  ", "/Guide")
    with pytest.raises(CommandError):
        docops.get_document(FakeClient(), "Work", "")


def test_get_document_missing_path_raises():
    with pytest.raises(CommandError):
        docops.get_document(FakeClient(), "Work", "/Nope")


def test_history_empty(capsys):
    client = FakeClient()
    assert docops.get_document_history(client, path="/Guide") == []
    assert "没有找到历史记录" in capsys.readouterr().out
    assert client.calls[0] == ("search_history", "/Guide", "", 1)


def test_history_uses_first_snapshot():
    client = FakeClient()
    client.history = {"histories": ["1700000000", "1600000000"], "pageCount": 1, "totalCount": 2}
    client.history_items = [{"title": "T", "op": "update", "path": "/p", "notebook": WORK_ID}]
    items = docops.get_document_history(client, notebook="Work", query="kw")
    assert items == client.history_items
    assert ("items", "1700000000", "kw", "Work") in client.calls


def test_history_json_file(tmp_path):
    client = FakeClient()
    client.history = {"histories": ["1700000000"], "pageCount": 3, "totalCount": 5}
    client.history_items = [{"title": "T"}]
    target = tmp_path / "h.json"
    docops.get_document_history(client, query="kw", output_file=str(target))
    written = json.loads(target.read_text(encoding="utf-8"))
    assert written["count"] == 1
    assert written["pageCount"] == 3
    assert written["history"] == [{"title": "T"}]


def test_rollback_requires_path():
    with pytest.raises(CommandError):
        docops.rollback_document(FakeClient(), "  ")


def test_rollback_resolves_notebook():
    client = FakeClient()
    assert docops.rollback_document(client, "/history/x", "Work") == WORK_ID
    assert ("rollback", WORK_ID, "/history/x") in client.calls


def test_copy_document_duplicates_resolved_id():
    client = FakeClient(hpaths={(WORK_ID, "/Guide"): [DOC_ID]})
    assert docops.copy_document(client, "Work", "Guide") == DOC_ID
    assert ("duplicate", DOC_ID) in client.calls


def test_copy_document_requires_path():
    with pytest.raises(CommandError):
        docops.copy_document(FakeClient(), "Work", "")


def test_move_into_same_notebook():
    client = FakeClient(hpaths={(WORK_ID, "/A"): ["id-a-00000000001"], (WORK_ID, "/B"): ["id-b-00000000001"]})
    dest = docops.move_document(client, "Work", "/A", "/B")
    assert dest == (WORK_ID, "/id-b-00000000001/")
    assert client.calls[-1] == ("move", ["/id-a-00000000001/"], WORK_ID, "/id-b-00000000001/")


def test_move_to_notebook_root():
    client = FakeClient(hpaths={(WORK_ID, "/A"): ["id-a-00000000001"]})
    assert docops.move_document(client, "Work", "/A", "Other") == (OTHER_ID, "/")


def test_move_with_notebook_prefix():
    client = FakeClient(hpaths={(WORK_ID, "/A"): ["id-a-00000000001"], (OTHER_ID, "/B"): ["id-b-00000000001"]})
    assert docops.move_document(client, "Work", "/A", "Other:/B") == (OTHER_ID, "/id-b-00000000001/")


def test_move_unknown_target_notebook():
    client = FakeClient(hpaths={(WORK_ID, "/A"): ["id-a-00000000001"]})
    with pytest.raises(CommandError):
        docops.move_document(client, "Work", "/A", "Missing:/B")


def test_move_requires_paths():
    with pytest.raises(CommandError):
        docops.move_document(FakeClient(), "Work", "/A", " ")


def test_daily_picks_first_open_notebook(capsys):
    client = FakeClient(notebooks=[
        Notebook(id=CLOSED_ID, name="Closed", closed=True),
        Notebook(id=WORK_ID, name="Work"),
    ])
    result = docops.create_daily_note(client)
    assert result["name"] == "2024-01-02"
    assert ("daily", WORK_ID) in client.calls
    assert "daily/2024-01-02" in capsys.readouterr().out


def test_daily_without_open_notebook():
    client = FakeClient(notebooks=[Notebook(id=CLOSED_ID, name="Closed", closed=True)])
    with pytest.raises(CommandError):
        docops.create_daily_note(client)