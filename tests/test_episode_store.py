"""Tests for the episode store."""

import pytest

from cinetime_server.core.exceptions import StoreUnavailable, ValidationError
from cinetime_server.models.episode import EpisodeFields, WatchState
from cinetime_server.repositories.episode_repository import EpisodeRepository
from cinetime_server.services.episode_store import EpisodeStore
from cinetime_server.services.show_store import ShowStore
from conftest import OTHER_OWNER, OWNER, show_request, unavailable_session_factory


@pytest.mark.asyncio
async def test_upsert_creates_episode_with_defaults(episode_store):
    """A new episode is unwatched with the default runtime."""
    episode = await episode_store.upsert_episode(OWNER, 100, 1, 1)

    assert episode.watch_state == WatchState.UNWATCHED
    assert episode.runtime == 45
    assert episode.watched_at is None
    assert episode.created_at is not None


@pytest.mark.asyncio
async def test_upsert_same_identity_updates_existing(episode_store):
    """Upserting an existing identity updates the record instead of duplicating it."""
    first = await episode_store.upsert_episode(
        OWNER, 100, 1, 1, EpisodeFields(episode_title="Pilot", runtime=50)
    )
    second = await episode_store.upsert_episode(
        OWNER, 100, 1, 1, EpisodeFields(watch_state=WatchState.WATCHED)
    )

    assert second.id == first.id
    assert second.episode_title == "Pilot"
    assert second.runtime == 50
    assert second.watch_state == WatchState.WATCHED

    episodes = await episode_store.list_episodes_for_show(OWNER, 100)
    assert len(episodes) == 1


@pytest.mark.asyncio
async def test_same_episode_for_different_owners_is_separate(episode_store):
    """Identity includes the owner."""
    await episode_store.upsert_episode(OWNER, 100, 1, 1)
    await episode_store.upsert_episode(OTHER_OWNER, 100, 1, 1)

    assert len(await episode_store.list_episodes_for_show(OWNER, 100)) == 1
    assert len(await episode_store.list_episodes_for_show(OTHER_OWNER, 100)) == 1


@pytest.mark.asyncio
async def test_watched_sets_watched_at(episode_store):
    """Marking an episode watched stamps watched_at."""
    episode = await episode_store.upsert_episode(
        OWNER, 100, 1, 1, EpisodeFields(watch_state=WatchState.WATCHED)
    )

    assert episode.watched_at is not None


@pytest.mark.asyncio
async def test_leaving_watched_clears_watched_at(episode_store):
    """Any state other than watched clears watched_at."""
    await episode_store.mark_watched(OWNER, 100, 1, 1)

    skipped = await episode_store.mark_skipped(OWNER, 100, 1, 1)
    assert skipped.watch_state == WatchState.SKIPPED
    assert skipped.watched_at is None

    await episode_store.mark_watched(OWNER, 100, 1, 1)
    unwatched = await episode_store.mark_unwatched(OWNER, 100, 1, 1)
    assert unwatched.watch_state == WatchState.UNWATCHED
    assert unwatched.watched_at is None


@pytest.mark.asyncio
async def test_watched_at_ignored_unless_watched(episode_store):
    """A watched_at supplied for an unwatched episode is dropped."""
    from datetime import datetime

    episode = await episode_store.upsert_episode(
        OWNER, 100, 1, 1, EpisodeFields(watched_at=datetime(2024, 1, 1))
    )

    assert episode.watched_at is None


@pytest.mark.asyncio
async def test_updating_other_fields_keeps_watched_at(episode_store):
    """Rating a watched episode does not restamp it."""
    watched = await episode_store.mark_watched(OWNER, 100, 1, 1)
    rated = await episode_store.upsert_episode(OWNER, 100, 1, 1, EpisodeFields(rating=4))

    assert rated.watched_at == watched.watched_at
    assert rated.rating == 4


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "season_number,episode_number",
    [(1, 0), (1, -3), (-1, 1)],
)
async def test_invalid_identity_rejected(episode_store, season_number, episode_number):
    """Bad season/episode numbers raise and write nothing."""
    with pytest.raises(ValidationError):
        await episode_store.upsert_episode(OWNER, 100, season_number, episode_number)

    assert await episode_store.list_episodes_for_show(OWNER, 100) == []


@pytest.mark.asyncio
async def test_specials_season_allowed(episode_store):
    """Season 0 holds specials."""
    episode = await episode_store.upsert_episode(OWNER, 100, 0, 1)

    assert episode.season_number == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6])
async def test_out_of_range_rating_rejected(episode_store, rating):
    """Ratings must be 1-5."""
    with pytest.raises(ValidationError):
        await episode_store.upsert_episode(OWNER, 100, 1, 1, EpisodeFields(rating=rating))


@pytest.mark.asyncio
async def test_explicit_null_runtime_falls_back_to_default(episode_store):
    """Unknown runtime means the default runtime."""
    episode = await episode_store.upsert_episode(
        OWNER, 100, 1, 1, EpisodeFields(runtime=None)
    )

    assert episode.runtime == 45


@pytest.mark.asyncio
async def test_delete_episode(episode_store):
    """Deleting reports whether a record was removed."""
    await episode_store.upsert_episode(OWNER, 100, 1, 1)

    assert await episode_store.delete_episode(OWNER, 100, 1, 1) is True
    assert await episode_store.delete_episode(OWNER, 100, 1, 1) is False
    assert await episode_store.get_episode(OWNER, 100, 1, 1) is None


@pytest.mark.asyncio
async def test_delete_episodes_for_show_is_idempotent(episode_store):
    """Bulk delete returns the count and is a no-op when repeated."""
    for number in range(1, 4):
        await episode_store.upsert_episode(OWNER, 100, 1, number)
    await episode_store.upsert_episode(OWNER, 200, 1, 1)

    assert await episode_store.delete_episodes_for_show(OWNER, 100) == 3
    assert await episode_store.delete_episodes_for_show(OWNER, 100) == 0
    assert len(await episode_store.list_episodes_for_show(OWNER, 200)) == 1


@pytest.mark.asyncio
async def test_find_episode_group_counts(episode_store):
    """Episodes are counted per (owner, show)."""
    for number in range(1, 4):
        await episode_store.upsert_episode(OWNER, 100, 1, number)
    await episode_store.upsert_episode(OWNER, 200, 2, 1)
    await episode_store.upsert_episode(OTHER_OWNER, 100, 1, 1)

    groups = await episode_store.find_episode_group_counts()
    counts = {(g.owner_id, g.catalog_id): g.count for g in groups}

    assert counts == {(OWNER, 100): 3, (OWNER, 200): 1, (OTHER_OWNER, 100): 1}

    own_groups = await episode_store.find_episode_group_counts(OTHER_OWNER)
    assert [(g.catalog_id, g.count) for g in own_groups] == [(100, 1)]


@pytest.mark.asyncio
async def test_list_episodes_ordered_by_season_and_episode(episode_store):
    """Show episodes come back in season order."""
    await episode_store.upsert_episode(OWNER, 100, 2, 1)
    await episode_store.upsert_episode(OWNER, 100, 1, 2)
    await episode_store.upsert_episode(OWNER, 100, 1, 1)

    episodes = await episode_store.list_episodes_for_show(OWNER, 100)

    assert [(e.season_number, e.episode_number) for e in episodes] == [(1, 1), (1, 2), (2, 1)]


@pytest.mark.asyncio
async def test_list_episodes_by_state(episode_store):
    """Episodes can be filtered by watch state."""
    await episode_store.mark_watched(OWNER, 100, 1, 1)
    await episode_store.mark_skipped(OWNER, 100, 1, 2)
    await episode_store.upsert_episode(OWNER, 100, 1, 3)

    watched = await episode_store.list_episodes_by_state(OWNER, WatchState.WATCHED)

    assert [e.episode_number for e in watched] == [1]


@pytest.mark.asyncio
async def test_hook_runs_after_writes_and_deletes(episode_store):
    """The recompute hook is called with the show identity."""
    calls = []

    async def hook(owner_id, catalog_id):
        calls.append((owner_id, catalog_id))

    episode_store.set_recompute_hook(hook)
    await episode_store.upsert_episode(OWNER, 100, 1, 1)
    await episode_store.delete_episode(OWNER, 100, 1, 1)
    await episode_store.delete_episode(OWNER, 100, 1, 1)

    assert calls == [(OWNER, 100), (OWNER, 100)]


@pytest.mark.asyncio
async def test_hook_failure_does_not_fail_write(episode_store):
    """A failing recompute never surfaces to the writer."""

    async def failing_hook(owner_id, catalog_id):
        raise RuntimeError("boom")

    episode_store.set_recompute_hook(failing_hook)
    episode = await episode_store.mark_watched(OWNER, 100, 1, 1)

    assert episode.watch_state == WatchState.WATCHED
    assert await episode_store.get_episode(OWNER, 100, 1, 1) is not None
    assert await episode_store.delete_episode(OWNER, 100, 1, 1) is True


@pytest.mark.asyncio
async def test_add_missing_episodes_leaves_existing_untouched(episode_store):
    """Import only creates episodes the owner does not have."""
    await episode_store.mark_watched(OWNER, 100, 1, 1)

    created = await episode_store.add_missing_episodes(
        OWNER,
        100,
        [
            (1, 1, EpisodeFields(episode_title="Pilot")),
            (1, 2, EpisodeFields(episode_title="Second", runtime=30)),
            (1, 3, EpisodeFields(episode_title="Third")),
        ],
    )

    assert [e.episode_number for e in created] == [2, 3]
    assert created[0].runtime == 30
    assert created[1].runtime == 45

    first = await episode_store.get_episode(OWNER, 100, 1, 1)
    assert first.watch_state == WatchState.WATCHED
    assert first.episode_title is None


@pytest.mark.asyncio
async def test_add_missing_episodes_validates_all_before_writing(episode_store):
    """One bad identity rejects the whole import."""
    with pytest.raises(ValidationError):
        await episode_store.add_missing_episodes(
            OWNER, 100, [(1, 1, EpisodeFields()), (1, 0, EpisodeFields())]
        )

    assert await episode_store.list_episodes_for_show(OWNER, 100) == []


@pytest.mark.asyncio
async def test_add_missing_episodes_rejects_negative_runtime(episode_store):
    with pytest.raises(ValidationError):
        await episode_store.add_missing_episodes(
            OWNER, 100, [(1, 1, EpisodeFields()), (1, 2, EpisodeFields(runtime=-5))]
        )

    assert await episode_store.list_episodes_for_show(OWNER, 100) == []


@pytest.mark.asyncio
async def test_database_errors_raise_store_unavailable():
    """Persistence failures surface as StoreUnavailable."""
    episode_store = EpisodeStore(unavailable_session_factory)
    show_store = ShowStore(unavailable_session_factory)

    with pytest.raises(StoreUnavailable):
        await episode_store.upsert_episode(OWNER, 100, 1, 1)
    with pytest.raises(StoreUnavailable):
        await episode_store.list_episodes_for_show(OWNER, 100)
    with pytest.raises(StoreUnavailable):
        await show_store.add(OWNER, show_request(100))


def stale_identity_lookup(monkeypatch, misses: int) -> list:
    """Make the first `misses` identity lookups miss existing records.

    Simulates another writer inserting the same episode between this
    writer's lookup and its insert.
    """
    original = EpisodeRepository.get_by_identity
    calls = []

    async def lookup(self, owner_id, catalog_id, season_number, episode_number):
        calls.append((owner_id, catalog_id, season_number, episode_number))
        if len(calls) <= misses:
            return None
        return await original(self, owner_id, catalog_id, season_number, episode_number)

    monkeypatch.setattr(EpisodeRepository, "get_by_identity", lookup)
    return calls


@pytest.mark.asyncio
async def test_lost_insert_race_retries_as_update(episode_store, monkeypatch):
    """An insert that collides with a concurrent insert updates that record."""
    await episode_store.upsert_episode(OWNER, 100, 1, 1, EpisodeFields(runtime=30))
    calls = stale_identity_lookup(monkeypatch, misses=1)

    episode = await episode_store.upsert_episode(
        OWNER, 100, 1, 1, EpisodeFields(watch_state=WatchState.WATCHED)
    )

    assert len(calls) == 2
    assert episode.watch_state == WatchState.WATCHED
    assert episode.runtime == 30
    assert episode.watched_at is not None
    episodes = await episode_store.list_episodes_for_show(OWNER, 100)
    assert len(episodes) == 1
    assert episodes[0].id == episode.id


@pytest.mark.asyncio
async def test_repeated_insert_collision_raises_store_unavailable(episode_store, monkeypatch):
    await episode_store.upsert_episode(OWNER, 100, 1, 1)
    stale_identity_lookup(monkeypatch, misses=2)

    with pytest.raises(StoreUnavailable):
        await episode_store.mark_watched(OWNER, 100, 1, 1)

    episodes = await episode_store.list_episodes_for_show(OWNER, 100)
    assert len(episodes) == 1
    assert episodes[0].watch_state == WatchState.UNWATCHED
