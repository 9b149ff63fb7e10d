import pytest

from siyuancli import output
from siyuancli.exporting import export_doc, resolve_doc_id, write_to_file
from siyuancli.models import CommandError, Notebook

NB_ID = "20240101120000-nbaaaaa"
DOC_ID = "20240101120000-docaaaa"


@pytest.fixture(autouse=True)
def _table_format():
    output.set_format("")
    yield
    output.set_format("")


class FakeClient:
    def __init__(self):
        self.calls = []

    def list_notebooks(self):
        return [Notebook(id=NB_ID, name="Work")]

    def get_ids_by_hpath(self, notebook_id, path):
        self.calls.append(("hpath", notebook_id, path))
        return [DOC_ID] if path == "/Guide" else []

    def export_md_content(self, doc_id):
        self.calls.append(("md", doc_id))
        return "# Guide\nbody\n", "/Guide"

    def export_html(self, doc_id):
        self.calls.append(("html", doc_id))
        return "<h1>Guide</h1>"

    def export_docx(self, doc_id):
        self.calls.append(("docx", doc_id))
        return {"path": "/export/guide.docx"}


def test_write_to_file_creates_directories(tmp_path):
    target = tmp_path / "a" / "b" / "out.txt"
    write_to_file(str(target), "héllo")
    assert target.read_text(encoding="utf-8") == "héllo"


def test_write_to_file_bytes(tmp_path):
    target = tmp_path / "data.bin"
    write_to_file(str(target), b"\x00\x01")
    assert target.read_bytes() == b"\x00\x01"


def test_resolve_doc_id_by_path():
    client = FakeClient()
    assert resolve_doc_id(client, "Work", "Guide") == DOC_ID
    assert ("hpath", NB_ID, "/Guide") in client.calls


def test_resolve_doc_id_unknown_path():
    with pytest.raises(CommandError):
        resolve_doc_id(FakeClient(), "Work", "Missing")


def test_export_md_to_file(tmp_path):
    target = tmp_path / "out" / "guide.md"
    result = export_doc(FakeClient(), doc_id=DOC_ID, fmt="md", output_file=str(target))
    assert result == str(target)
    assert target.read_text(encoding="utf-8") == "# Guide\nbody\n"


def test_export_md_default_name(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = export_doc(FakeClient(), doc_id=DOC_ID, fmt="MD")
    assert result == DOC_ID + ".md"
    assert (tmp_path / result).exists()


def test_export_html_by_notebook_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    client = FakeClient()
    result = export_doc(client, notebook="Work", path="Guide", fmt="html")
    assert result == DOC_ID + ".html"
    assert (tmp_path / result).read_text(encoding="utf-8") == "<h1>Guide</h1>"


def test_export_docx_stays_on_server():
    client = FakeClient()
    assert export_doc(client, doc_id=DOC_ID, fmt="docx") == ""
    assert client.calls == [("docx", DOC_ID)]


def test_export_rejects_unknown_format():
    client = FakeClient()
    with pytest.raises(CommandError):
        export_doc(client, doc_id=DOC_ID, fmt="pdf")
    assert client.calls == []


def test_export_requires_path_without_id():
    with pytest.raises(CommandError):
        export_doc(FakeClient(), notebook="Work", path="  ")