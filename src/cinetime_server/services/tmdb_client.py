"""TMDB API client for fetching title and episode metadata."""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..core.config import settings
from ..core.exceptions import CatalogError
from ..models.media import MediaKind

logger = logging.getLogger(__name__)

DEFAULT_MOVIE_RUNTIME = 120


@dataclass
class TitleMetadata:
    """Movie or show metadata from TMDB."""

    catalog_id: int
    kind: MediaKind
    title: str
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    runtime_minutes: Optional[int] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None


@dataclass
class CatalogEpisode:
    """An episode listed in a TMDB season."""

    season_number: int
    episode_number: int
    name: str
    air_date: Optional[str] = None
    overview: Optional[str] = None
    runtime: Optional[int] = None  # Duration in minutes
    still_path: Optional[str] = None


class TMDBClient:
    """Client for the TMDB v3 API."""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        language: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize TMDB client.

        Args:
            api_key: TMDB API key
            base_url: API base URL
            language: Response language
            http_client: Optional preconfigured HTTP client
        """
        self.api_key = api_key
        self.base_url = (base_url or settings.tmdb_base_url).rstrip("/")
        self.language = language or settings.tmdb_language
        self._client = http_client or httpx.AsyncClient(timeout=30.0)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _get(self, path: str) -> httpx.Response:
        params = {"api_key": self.api_key, "language": self.language}
        try:
            return await self._client.get(f"{self.base_url}{path}", params=params)
        except httpx.HTTPError as e:
            logger.error(f"TMDB request to {path} failed: {e}")
            raise CatalogError(f"TMDB request failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, what: str) -> None:
        if response.status_code != 200:
            logger.error(f"TMDB {what} request failed: {response.status_code}")
            raise CatalogError(
                f"Failed to fetch {what}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

    async def get_movie_details(self, movie_id: int) -> TitleMetadata:
        """
        Get movie metadata.

        Args:
            movie_id: TMDB movie ID

        Returns:
            TitleMetadata for the movie
        """
        response = await self._get(f"/movie/{movie_id}")
        self._raise_for_status(response, f"movie {movie_id}")
        data = response.json()

        return TitleMetadata(
            catalog_id=data["id"],
            kind=MediaKind.MOVIE,
            title=data.get("title") or data.get("original_title") or "",
            poster_path=data.get("poster_path"),
            release_date=data.get("release_date") or None,
            runtime_minutes=data.get("runtime") or DEFAULT_MOVIE_RUNTIME,
        )

    async def get_tv_details(self, tv_id: int) -> TitleMetadata:
        """
        Get TV show metadata.

        Args:
            tv_id: TMDB TV ID

        Returns:
            TitleMetadata for the show
        """
        response = await self._get(f"/tv/{tv_id}")
        self._raise_for_status(response, f"TV show {tv_id}")
        data = response.json()

        run_times = data.get("episode_run_time") or []
        return TitleMetadata(
            catalog_id=data["id"],
            kind=MediaKind.SHOW,
            title=data.get("name") or data.get("original_name") or "",
            poster_path=data.get("poster_path"),
            release_date=data.get("first_air_date") or None,
            runtime_minutes=run_times[0] if run_times else None,
            number_of_seasons=data.get("number_of_seasons") or 1,
            number_of_episodes=data.get("number_of_episodes") or 1,
        )

    async def get_title(self, kind: MediaKind, catalog_id: int) -> TitleMetadata:
        """Get movie or show metadata by kind."""
        if kind == MediaKind.MOVIE:
            return await self.get_movie_details(catalog_id)
        return await self.get_tv_details(catalog_id)

    async def get_season_episodes(
        self, tv_id: int, season_number: int
    ) -> list[CatalogEpisode]:
        """
        Get the episodes of a TV season.

        Args:
            tv_id: TMDB TV ID
            season_number: Season number

        Returns:
            Episodes of the season, empty if the season does not exist
        """
        response = await self._get(f"/tv/{tv_id}/season/{season_number}")
        if response.status_code == 404:
            logger.info(f"TMDB has no season {season_number} for TV show {tv_id}")
            return []
        self._raise_for_status(response, f"season {season_number} of TV show {tv_id}")

        episodes = []
        for item in response.json().get("episodes") or []:
            episode_number = item.get("episode_number")
            if not episode_number:
                continue
            episodes.append(
                CatalogEpisode(
                    season_number=item.get("season_number", season_number),
                    episode_number=episode_number,
                    name=item.get("name") or f"Episode {episode_number}",
                    air_date=item.get("air_date") or None,
                    overview=item.get("overview") or None,
                    runtime=item.get("runtime"),
                    still_path=item.get("still_path"),
                )
            )

        logger.info(
            f"Fetched {len(episodes)} episodes for TV show {tv_id} season {season_number}"
        )
        return episodes
