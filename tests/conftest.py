"""Shared test fixtures."""

import os

# Keep the application engine off the filesystem during tests
os.environ.setdefault("CINETIME_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cinetime_server.database import init_db
from cinetime_server.models.media import MediaCreate, MediaKind
from cinetime_server.services.consistency import ConsistencyEngine
from cinetime_server.services.episode_store import EpisodeStore
from cinetime_server.services.reconciler import OrphanReconciler
from cinetime_server.services.show_store import ShowStore

OWNER = "user-1"
OTHER_OWNER = "user-2"


@pytest_asyncio.fixture
async def session_factory():
    """Session factory bound to a fresh in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def show_store(session_factory):
    """Watchlist store on the test database."""
    return ShowStore(session_factory)


@pytest.fixture
def episode_store(session_factory):
    """Episode store on the test database, without a recompute hook."""
    return EpisodeStore(session_factory, default_runtime=45)


@pytest.fixture
def consistency_engine(episode_store, show_store):
    """Consistency engine wired as the episode store's post-write hook."""
    engine = ConsistencyEngine(episode_store, show_store, lock_timeout=1.0)
    episode_store.set_recompute_hook(engine.recompute_show_safely)
    return engine


@pytest.fixture
def reconciler(episode_store, show_store):
    """Orphan reconciler over the test stores."""
    return OrphanReconciler(episode_store, show_store)


def show_request(catalog_id: int, title: str = "Test Show") -> MediaCreate:
    """Build a request adding a TV show."""
    return MediaCreate(catalog_id=catalog_id, kind=MediaKind.SHOW, title=title)


def movie_request(catalog_id: int, title: str = "Test Movie", **kwargs) -> MediaCreate:
    """Build a request adding a movie."""
    return MediaCreate(catalog_id=catalog_id, kind=MediaKind.MOVIE, title=title, **kwargs)


def unavailable_session_factory():
    """Session factory for a database that cannot be opened."""
    raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))
