"""Tests for orphaned episode reconciliation."""

import pytest

from cinetime_server.core.exceptions import StoreUnavailable
from cinetime_server.services.episode_store import EpisodeStore
from cinetime_server.services.reconciler import OrphanReconciler
from conftest import OTHER_OWNER, OWNER, movie_request, show_request


async def add_episodes(episode_store, owner_id, catalog_id, count):
    for number in range(1, count + 1):
        await episode_store.upsert_episode(owner_id, catalog_id, 1, number)


@pytest.mark.asyncio
async def test_deleted_show_leaves_orphans_until_reconciled(show_store, episode_store, reconciler):
    """Removing a show without cascading leaves its episodes as an orphan group."""
    await show_store.add(OWNER, show_request(7))
    await add_episodes(episode_store, OWNER, 7, 5)
    await show_store.remove(OWNER, 7)

    orphaned = await reconciler.find_orphaned_groups()
    assert [(g.owner_id, g.catalog_id, g.count) for g in orphaned] == [(OWNER, 7, 5)]

    result = await reconciler.reconcile_all()
    assert result.total_deleted == 5
    assert [g.catalog_id for g in result.groups_reconciled] == [7]
    assert result.failed_groups == []
    assert await episode_store.list_episodes_for_show(OWNER, 7) == []


@pytest.mark.asyncio
async def test_reconcile_all_is_idempotent(show_store, episode_store, reconciler):
    """A second pass with no new writes deletes nothing."""
    await add_episodes(episode_store, OWNER, 7, 3)
    await add_episodes(episode_store, OTHER_OWNER, 8, 2)

    first = await reconciler.reconcile_all()
    second = await reconciler.reconcile_all()

    assert first.total_deleted == 5
    assert second.total_deleted == 0
    assert second.groups_reconciled == []


@pytest.mark.asyncio
async def test_creating_show_clears_orphan_status(show_store, episode_store, reconciler):
    """Episodes added before their show stop being orphans once it exists."""
    await add_episodes(episode_store, OWNER, 7, 2)
    assert len(await reconciler.find_orphaned_groups()) == 1

    await show_store.add(OWNER, show_request(7))

    assert await reconciler.find_orphaned_groups() == []


@pytest.mark.asyncio
async def test_find_orphans_is_read_only(episode_store, reconciler):
    """Finding orphans never deletes them."""
    await add_episodes(episode_store, OWNER, 7, 2)

    await reconciler.find_orphaned_groups()

    assert len(await episode_store.list_episodes_for_show(OWNER, 7)) == 2


@pytest.mark.asyncio
async def test_show_must_belong_to_same_owner(show_store, episode_store, reconciler):
    """Another owner's show does not adopt episodes."""
    await show_store.add(OTHER_OWNER, show_request(7))
    await add_episodes(episode_store, OWNER, 7, 2)
    await add_episodes(episode_store, OTHER_OWNER, 7, 1)

    orphaned = await reconciler.find_orphaned_groups()

    assert [(g.owner_id, g.catalog_id) for g in orphaned] == [(OWNER, 7)]


@pytest.mark.asyncio
async def test_movie_does_not_adopt_episodes(show_store, episode_store, reconciler):
    """Only a show-kind aggregate matches an episode group."""
    await show_store.add(OWNER, movie_request(7))
    await add_episodes(episode_store, OWNER, 7, 1)

    orphaned = await reconciler.find_orphaned_groups()

    assert [(g.owner_id, g.catalog_id) for g in orphaned] == [(OWNER, 7)]


@pytest.mark.asyncio
async def test_reconcile_owner_only_touches_that_owner(episode_store, reconciler):
    """Per-user reconciliation leaves other owners' orphans alone."""
    await add_episodes(episode_store, OWNER, 7, 2)
    await add_episodes(episode_store, OTHER_OWNER, 7, 3)

    result = await reconciler.reconcile_owner(OWNER)

    assert result.total_deleted == 2
    assert len(await episode_store.list_episodes_for_show(OTHER_OWNER, 7)) == 3
    assert [g.owner_id for g in await reconciler.find_orphaned_groups()] == [OTHER_OWNER]


@pytest.mark.asyncio
async def test_reconcile_one_show_ignores_orphan_status(show_store, episode_store, reconciler):
    """Explicit show deletion purges episodes even while the show exists."""
    await show_store.add(OWNER, show_request(7))
    await add_episodes(episode_store, OWNER, 7, 4)

    assert await reconciler.reconcile_one_show(OWNER, 7) == 4
    assert await reconciler.reconcile_one_show(OWNER, 7) == 0


class FlakyEpisodeStore(EpisodeStore):
    """Episode store whose bulk delete fails for one show."""

    failing_catalog_id = 8

    async def delete_episodes_for_show(self, owner_id, catalog_id):
        if catalog_id == self.failing_catalog_id:
            raise StoreUnavailable("disk I/O error")
        return await super().delete_episodes_for_show(owner_id, catalog_id)


@pytest.mark.asyncio
async def test_group_failure_does_not_abort_pass(session_factory, show_store):
    """One failing group is reported while the others are still cleaned."""
    episode_store = FlakyEpisodeStore(session_factory)
    reconciler = OrphanReconciler(episode_store, show_store)
    await add_episodes(episode_store, OWNER, 7, 2)
    await add_episodes(episode_store, OWNER, 8, 3)
    await add_episodes(episode_store, OWNER, 9, 1)

    result = await reconciler.reconcile_all()

    assert result.total_deleted == 3
    assert sorted(g.catalog_id for g in result.groups_reconciled) == [7, 9]
    assert [g.catalog_id for g in result.failed_groups] == [8]
    assert len(await episode_store.list_episodes_for_show(OWNER, 8)) == 3
