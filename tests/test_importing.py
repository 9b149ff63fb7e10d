import pytest

from siyuancli.importing import import_md, import_sy
from siyuancli.models import CommandError, Notebook

NB_ID = "20240101120000-nbaaaaa"


class FakeClient:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def list_notebooks(self):
        return [Notebook(id=NB_ID, name="Work")]

    def import_std_md(self, notebook, path):
        if self.fail:
            raise RuntimeError("boom")
        self.calls.append(("std", notebook, path))

    def import_zip_md(self, notebook, path):
        self.calls.append(("zip", notebook, path))

    def import_sy(self, notebook):
        self.calls.append(("sy", notebook))


@pytest.fixture
def md_file(tmp_path):
    path = tmp_path / "note.md"
    path.write_text("# Note\n", encoding="utf-8")
    return str(path)


def test_import_md_plain(md_file):
    client = FakeClient()
    assert import_md(client, md_file, "Work", "/inbox") == "Work"
    assert client.calls == [("std", NB_ID, "/inbox")]


def test_import_md_zip(tmp_path):
    archive = tmp_path / "NOTES.ZIP"
    archive.write_bytes(b"PK")
    client = FakeClient()
    import_md(client, str(archive), "work")
    assert client.calls == [("zip", NB_ID, "")]


def test_import_md_missing_file(tmp_path):
    client = FakeClient()
    with pytest.raises(FileNotFoundError):
        import_md(client, str(tmp_path / "absent.md"), "Work")
    assert client.calls == []


def test_import_md_empty_path():
    with pytest.raises(CommandError):
        import_md(FakeClient(), "  ", "Work")


def test_import_md_unknown_notebook(md_file):
    client = FakeClient()
    with pytest.raises(CommandError):
        import_md(client, md_file, "Nowhere")
    assert client.calls == []


def test_import_md_server_failure(md_file):
    with pytest.raises(CommandError):
        import_md(FakeClient(fail=True), md_file, "Work")


def test_import_sy(tmp_path):
    data = tmp_path / "export.sy.zip"
    data.write_bytes(b"PK")
    client = FakeClient()
    assert import_sy(client, str(data), NB_ID) == "Work"
    assert client.calls == [("sy", NB_ID)]


def test_import_sy_empty_path():
    with pytest.raises(CommandError):
        import_sy(FakeClient(), "", "Work")