import json

import pytest

from siyuancli import output, search
from siyuancli.models import CommandError, Notebook

NB_ONE = "20210817205410-2kvfpfn"
NB_TWO = "20210817205410-9zzzzzz"
DOC_A = "20220101000000-aaaaaaa"
DOC_B = "20220101000000-bbbbbbb"


class FakeClient:
    def __init__(self, blocks=(), docs=(), fail=False):
        self.blocks = list(blocks)
        self.docs = list(docs)
        self.fail = fail
        self.queries = []

    def list_notebooks(self):
        return [Notebook(id=NB_ONE, name="Work"), Notebook(id=NB_TWO, name="Home")]

    def full_text_search_block(self, query):
        if self.fail:
            raise RuntimeError("boom")
        self.queries.append(query)
        return self.blocks

    def search_docs(self, k):
        if self.fail:
            raise RuntimeError("boom")
        self.queries.append(k)
        return self.docs


@pytest.fixture(autouse=True)
def reset_format():
    output.set_format("")
    yield
    output.set_format("")


def make_blocks():
    return [
        {"id": DOC_A, "box": NB_ONE, "content": "alpha\nbeta", "type": "p", "hpath": "/x"},
        {"id": DOC_B, "box": NB_TWO, "content": "gamma", "type": "h", "hpath": "/y"},
        {"id": "c", "box": NB_ONE, "content": "delta", "type": "p", "hpath": "/z"},
    ]


def test_doc_id_from_path():
    assert search.doc_id_from_path(f"/{DOC_B}/{DOC_A}.sy") == DOC_A
    assert search.doc_id_from_path(f"{DOC_A}.sy") == DOC_A


def test_doc_title_prefers_title_then_hpath():
    assert search.doc_title("Given", "a/b") == "Given"
    assert search.doc_title("", "编程/读书笔记/三体") == "三体"
    assert search.doc_title("", "solo") == "solo"


def test_search_block_filters_by_notebook():
    results = search.search_block(FakeClient(blocks=make_blocks()), "a", notebook="Work")
    assert [r["id"] for r in results] == [DOC_A, "c"]
    assert all(r["box"] == NB_ONE for r in results)


def test_search_block_limit():
    client = FakeClient(blocks=make_blocks())
    results = search.search_block(client, "kw", limit=2)
    assert len(results) == 2
    assert client.queries == ["kw"]


def test_search_block_table_flattens_content(capsys):
    search.search_block(FakeClient(blocks=make_blocks()[:1]), "a")
    out = capsys.readouterr().out
    assert "alpha beta" in out
    assert "找到 1 个匹配块" in out


def test_search_block_empty(capsys):
    assert search.search_block(FakeClient(), "a") == []
    assert "未找到匹配的块" in capsys.readouterr().out


def test_search_block_json_file(tmp_path):
    target = tmp_path / "hits.json"
    blocks = make_blocks()
    search.search_block(FakeClient(blocks=blocks), "a", output_file=str(target))
    assert json.loads(target.read_text(encoding="utf-8")) == blocks


def test_search_block_requires_keyword():
    with pytest.raises(CommandError, match="搜索关键词不能为空"):
        search.search_block(FakeClient(), "   ")


def test_search_block_failure():
    with pytest.raises(CommandError, match="搜索块失败"):
        search.search_block(FakeClient(fail=True), "a")


def test_search_doc_json_enriched(capsys):
    output.set_format("json")
    docs = [{"id": "", "title": "", "hpath": "/编程/三体", "box": NB_ONE, "path": f"/{DOC_A}.sy"}]
    search.search_doc(FakeClient(docs=docs), "三体")
    data = json.loads(capsys.readouterr().out)
    assert data == [
        {"id": DOC_A, "title": "三体", "hpath": "/编程/三体", "box": NB_ONE, "path": f"/{DOC_A}.sy"}
    ]


def test_search_doc_unknown_notebook():
    with pytest.raises(CommandError, match="不存在"):
        search.search_doc(FakeClient(docs=[]), "a", notebook="Nowhere")


def test_search_doc_table_uses_path_id(capsys):
    docs = [{"title": "T", "hpath": "/T", "box": NB_TWO, "path": f"/{DOC_B}.sy"}]
    results = search.search_doc(FakeClient(docs=docs), "T", notebook="Home")
    assert results == docs
    assert DOC_B in capsys.readouterr().out


def test_search_doc_failure():
    with pytest.raises(CommandError, match="搜索文档失败"):
        search.search_doc(FakeClient(fail=True), "a")