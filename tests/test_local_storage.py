import pytest

from docuflow.errors import StorageError
from docuflow.storage.base import JSON_MIME, MARKDOWN_MIME, StorageClient
from docuflow.storage.local import LocalFolderStorage


@pytest.fixture
def source(tmp_path):
    d = tmp_path / "in"
    d.mkdir()
    (d / "b.json").write_text('{"nodes": [], "connections": {}}', encoding="utf-8")
    (d / "a.json").write_text('{"nodes": [], "connections": {}, "name": "Ä"}', encoding="utf-8")
    (d / "notes.md").write_text("# hi", encoding="utf-8")
    (d / "nested").mkdir()
    (d / "nested" / "c.json").write_text("{}", encoding="utf-8")
    return d


@pytest.mark.asyncio
async def test_list_is_sorted_filtered_and_non_recursive(source):
    storage = LocalFolderStorage()
    assert isinstance(storage, StorageClient)
    files = await storage.list_files(str(source), JSON_MIME)
    assert [f.name for f in files] == ["a.json", "b.json"]
    assert all(f.mime_type == JSON_MIME for f in files)

    md = await storage.list_files(str(source), MARKDOWN_MIME)
    assert [f.name for f in md] == ["notes.md"]


@pytest.mark.asyncio
async def test_fetch_reads_utf8(source):
    storage = LocalFolderStorage()
    files = await storage.list_files(str(source))
    assert '"Ä"' in await storage.fetch_content(files[0].id)


@pytest.mark.asyncio
async def test_upload_creates_folder_and_overwrites(tmp_path):
    storage = LocalFolderStorage()
    dest = tmp_path / "out" / "docs"
    await storage.upload_file("x.md", "first", str(dest), MARKDOWN_MIME)
    await storage.upload_file("x.md", "second", str(dest), MARKDOWN_MIME)
    assert (dest / "x.md").read_text(encoding="utf-8") == "second"
    assert sorted(p.name for p in dest.iterdir()) == ["x.md"]


@pytest.mark.asyncio
async def test_upload_refuses_paths(tmp_path):
    with pytest.raises(StorageError):
        await LocalFolderStorage().upload_file("../escape.json", "{}", str(tmp_path), JSON_MIME)


@pytest.mark.asyncio
async def test_missing_folder_and_file(tmp_path):
    storage = LocalFolderStorage()
    with pytest.raises(StorageError):
        await storage.list_files(str(tmp_path / "nope"))
    with pytest.raises(StorageError):
        await storage.fetch_content(str(tmp_path / "nope.json"))
