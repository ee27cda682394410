"""Tests for reverting a record to an earlier version."""

import pytest

from tests.records import HtmlBlock, Page
from versioned_records.errors import PersistenceFailure
from versioned_records.store.record_store import SaveOutcome


@pytest.mark.asyncio
async def test_revert_creates_new_version(store, versions, side_effect):
    block = HtmlBlock(name="First", content="one")
    await store.save(block)
    block.name = "Second"
    block.content = "two"
    await store.save(block)
    side_effect.reset_mock()

    result = await store.revert_to(block, 1)

    assert result.outcome == SaveOutcome.CHANGED_UPDATE
    assert block.version == 3
    assert block.name == "First"
    assert block.content == "one"
    side_effect.assert_awaited_once_with(block)
    history = await versions.get_versions(HtmlBlock, block.id)
    assert [v.version for v in history] == [1, 2, 3]
    assert history[2].data == history[0].data
    assert history[2].version_comment == "Reverted to version 1"


@pytest.mark.asyncio
async def test_revert_to_current_state_is_unchanged(store, versions):
    block = HtmlBlock(name="Only")
    await store.save(block)

    result = await store.revert_to(block, 1, comment="no-op")

    assert result.skipped_side_effects is True
    assert await versions.count_versions(HtmlBlock, block.id) == 1


@pytest.mark.asyncio
async def test_revert_keeps_non_versioned_fields(store):
    page = Page(title="Draft", path="/about")
    await store.save(page)
    page.title = "Final"
    page.published = True
    await store.save(page)

    await store.revert_to(page, 1)

    assert page.title == "Draft"
    assert page.published is True


@pytest.mark.asyncio
async def test_revert_unknown_version(store):
    block = HtmlBlock(name="Short history")
    await store.save(block)

    with pytest.raises(ValueError, match="has no version 7"):
        await store.revert_to(block, 7)


@pytest.mark.asyncio
async def test_revert_unsaved_record(store):
    with pytest.raises(ValueError, match="must be saved"):
        await store.revert_to(HtmlBlock(name="New"), 1)


@pytest.mark.asyncio
async def test_failed_revert_leaves_record_untouched(store, versions, side_effect, monkeypatch):
    block = HtmlBlock(name="First")
    await store.save(block)
    block.name = "Second"
    await store.save(block)
    side_effect.reset_mock()

    async def failing_update(*args, **kwargs):
        raise PersistenceFailure("disk full")

    monkeypatch.setattr("versioned_records.store.record_store.update_record", failing_update)
    with pytest.raises(PersistenceFailure):
        await store.revert_to(block, 1)

    assert (block.name, block.version) == ("Second", 2)
    side_effect.assert_not_awaited()
    assert await versions.count_versions(HtmlBlock, block.id) == 2
