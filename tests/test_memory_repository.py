"""InMemoryDocumentRepository — pagination, cosine ordering, atomic writes."""
import pytest

from apps.api.exceptions import StoreException
from apps.api.repositories import ChunkCreate, DocumentCreate, InMemoryDocumentRepository


def _doc(content: str, *vectors: list[float]) -> DocumentCreate:
    return DocumentCreate(
        content=content,
        chunks=[ChunkCreate(chunk=f"{content}-{i}", embedding=v) for i, v in enumerate(vectors)],
    )


@pytest.fixture
def repo() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.mark.asyncio
async def test_ids_increase(repo):
    a = await repo.save_document(_doc("a", [1.0, 0.0]))
    b = await repo.save_document(_doc("b", [0.0, 1.0]))
    assert b.id > a.id
    assert a.chunk_count == 1


@pytest.mark.asyncio
async def test_relevant_chunks_ordered_by_cosine_distance(repo):
    await repo.save_document(_doc("doc", [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]))

    chunks = await repo.get_relevant_chunks([1.0, 0.1], top_k=3)

    assert [c.chunk for c in chunks] == ["doc-0", "doc-2", "doc-1"]
    assert chunks[0].distance < chunks[1].distance < chunks[2].distance


@pytest.mark.asyncio
async def test_ties_broken_by_chunk_id(repo):
    await repo.save_document(_doc("first", [2.0, 0.0]))
    await repo.save_document(_doc("second", [1.0, 0.0]))  # same direction, same distance

    chunks = await repo.get_relevant_chunks([5.0, 0.0], top_k=2)

    assert [c.chunk for c in chunks] == ["first-0", "second-0"]
    assert chunks[0].id < chunks[1].id


@pytest.mark.asyncio
async def test_top_k_larger_than_corpus(repo):
    await repo.save_document(_doc("doc", [1.0, 0.0], [0.0, 1.0]))
    assert len(await repo.get_relevant_chunks([1.0, 0.0], top_k=10)) == 2


@pytest.mark.asyncio
async def test_mixed_dimensions_rejected_and_nothing_saved(repo):
    await repo.save_document(_doc("ok", [1.0, 0.0]))

    with pytest.raises(StoreException):
        await repo.save_document(_doc("bad", [1.0, 0.0], [1.0, 0.0, 0.0]))

    page = await repo.list_documents()
    assert [d.content for d in page.items] == ["ok"]
    assert len(await repo.get_relevant_chunks([1.0, 0.0], top_k=10)) == 1


@pytest.mark.asyncio
async def test_failed_replace_keeps_old_chunks(repo):
    await repo.save_document(_doc("other", [1.0, 1.0]))
    record = await repo.save_document(_doc("old", [1.0, 0.0], [0.0, 1.0]))

    with pytest.raises(StoreException):
        await repo.replace_document(record.id, _doc("new", [1.0, 2.0, 3.0]))

    kept = await repo.get_document(record.id)
    assert kept.content == "old"
    assert kept.chunk_count == 2


@pytest.mark.asyncio
async def test_emptied_store_accepts_a_new_dimension(repo):
    first = await repo.save_document(_doc("a", [1.0, 0.0]))
    second = await repo.save_document(_doc("b", [0.0, 1.0]))
    await repo.delete_document(first.id)

    with pytest.raises(StoreException):
        await repo.save_document(_doc("c", [1.0, 0.0, 0.0]))

    await repo.delete_document(second.id)
    await repo.save_document(_doc("d", [1.0, 0.0, 0.0]))

    chunks = await repo.get_relevant_chunks([1.0, 0.0, 0.0], top_k=5)
    assert [c.chunk for c in chunks] == ["d-0"]


@pytest.mark.asyncio
async def test_replacing_the_only_document_may_change_dimension(repo):
    record = await repo.save_document(_doc("old", [1.0, 0.0]))

    replaced = await repo.replace_document(record.id, _doc("new", [1.0, 0.0, 0.0]))

    assert replaced.chunk_count == 1
    assert len(await repo.get_relevant_chunks([0.0, 0.0, 1.0], top_k=5)) == 1
    with pytest.raises(StoreException):
        await repo.get_relevant_chunks([1.0, 0.0], top_k=5)


@pytest.mark.asyncio
async def test_replace_missing_returns_none(repo):
    assert await repo.replace_document(99, _doc("x", [1.0])) is None


@pytest.mark.asyncio
async def test_replace_bumps_updated_at(repo):
    record = await repo.save_document(_doc("old", [1.0, 0.0]))
    replaced = await repo.replace_document(record.id, _doc("new", [0.0, 1.0], [1.0, 1.0]))

    assert replaced.content == "new"
    assert replaced.chunk_count == 2
    assert replaced.created_at == record.created_at
    assert replaced.updated_at >= record.updated_at


@pytest.mark.asyncio
async def test_delete_cascades_to_chunks(repo):
    keep = await repo.save_document(_doc("keep", [1.0, 0.0]))
    gone = await repo.save_document(_doc("gone", [1.0, 0.0]))

    assert await repo.delete_document(gone.id) is True
    assert await repo.delete_document(gone.id) is False

    chunks = await repo.get_relevant_chunks([1.0, 0.0], top_k=10)
    assert {c.document_id for c in chunks} == {keep.id}


@pytest.mark.asyncio
async def test_page_pagination(repo):
    for i in range(5):
        await repo.save_document(_doc(f"d{i}", [1.0]))

    page = await repo.list_documents(page=2, page_size=2)

    assert [d.content for d in page.items] == ["d2", "d1"]
    assert page.page == 2
    assert page.page_size == 2
    assert page.total_items == 5
    assert page.total_pages == 3


@pytest.mark.asyncio
async def test_page_size_is_clamped(repo):
    page = await repo.list_documents(page=0, page_size=1000)
    assert page.page == 1
    assert page.page_size == 100
    assert page.total_pages == 0


@pytest.mark.asyncio
async def test_cursor_pagination_walks_all_documents(repo):
    for i in range(5):
        await repo.save_document(_doc(f"d{i}", [1.0]))

    first = await repo.list_documents_after(limit=2)
    second = await repo.list_documents_after(cursor=first.next_cursor, limit=2)
    third = await repo.list_documents_after(cursor=second.next_cursor, limit=2)

    assert [d.content for d in first.items] == ["d4", "d3"]
    assert [d.content for d in second.items] == ["d2", "d1"]
    assert [d.content for d in third.items] == ["d0"]
    assert third.next_cursor is None


@pytest.mark.asyncio
@pytest.mark.parametrize("cursor", ["", "abc", "-3", "0"])
async def test_bad_cursor_starts_from_newest(repo, cursor):
    await repo.save_document(_doc("a", [1.0]))
    await repo.save_document(_doc("b", [1.0]))

    page = await repo.list_documents_after(cursor=cursor, limit=20)
    assert [d.content for d in page.items] == ["b", "a"]
