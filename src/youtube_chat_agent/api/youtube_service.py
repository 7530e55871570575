"""YouTube Data API facade.

Public search uses the API key. Everything that touches the user's own
account goes through the credential manager and fails with
``UpstreamAuthError`` when no credential is loaded.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httplib2
from google_auth_httplib2 import AuthorizedHttp  # type: ignore[import-untyped]
from googleapiclient.discovery import build  # type: ignore[import-untyped]
from googleapiclient.errors import HttpError  # type: ignore[import-untyped]

from youtube_chat_agent.auth.credentials import CredentialManager
from youtube_chat_agent.cache.expiring import ExpiringCache
from youtube_chat_agent.config.settings import Settings, get_settings
from youtube_chat_agent.errors import UpstreamServiceError
from youtube_chat_agent.models.video import PlaylistInsertResult, VideoSummary

logger = logging.getLogger(__name__)

WATCH_HISTORY_CACHE_KEY = "watch-history"
WATCH_HISTORY_PLAYLIST_ID = "HL"


class YouTubeService:
    """Async wrapper around the blocking google-api-python-client."""

    def __init__(
        self,
        credentials: CredentialManager,
        cache: ExpiringCache,
        api_key: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            credentials: Owner of the delegated account credential.
            cache: Cache guarding rate-limited account reads.
            api_key: YouTube Data API key for public search. Defaults to settings.
            settings: Settings instance. Defaults to the cached settings.
        """
        settings = settings or get_settings()
        self.credentials = credentials
        self.cache = cache
        self.api_key = api_key or settings.youtube_api_key
        self.region_code = settings.recommendation_region_code
        self.playlist_title = settings.save_for_later_playlist_title
        self.history_ttl = settings.watch_history_cache_ttl_seconds
        self.timeout_seconds = settings.api_timeout_seconds
        self._public: Any = None

    @property
    def public(self) -> Any:
        """Lazy-load the API-key client."""
        if self._public is None:
            self._public = build(
                "youtube",
                "v3",
                developerKey=self.api_key,
                http=httplib2.Http(timeout=self.timeout_seconds),
                cache_discovery=False,
            )
        return self._public

    def authorized(self) -> Any:
        """Build a client bound to the delegated account.

        Raises:
            UpstreamAuthError: If no usable credential is available.
        """
        return build(
            "youtube",
            "v3",
            http=AuthorizedHttp(
                self.credentials.authorized_credentials(),
                http=httplib2.Http(timeout=self.timeout_seconds),
            ),
            cache_discovery=False,
        )

    async def search_videos(self, query: str, max_results: int) -> list[VideoSummary]:
        """Search public videos by keyword.

        Args:
            query: Search terms.
            max_results: Number of results to request.

        Returns:
            Videos in relevance order. Items without a video id are skipped.
        """
        if not self.api_key:
            raise UpstreamServiceError("YOUTUBE_API_KEY is not configured")

        request = self.public.search().list(
            q=query,
            type="video",
            part="snippet",
            maxResults=max_results,
        )
        response = await self._execute(request, label="search")
        return [
            video
            for video in (_parse_search_item(item) for item in response.get("items", []))
            if video is not None
        ]

    async def watch_history(self, limit: int = 25) -> list[VideoSummary]:
        """Recently watched videos, served from cache within the TTL window."""

        async def load() -> list[VideoSummary]:
            client = self.authorized()
            request = client.playlistItems().list(
                playlistId=WATCH_HISTORY_PLAYLIST_ID,
                part="snippet,contentDetails",
                maxResults=limit,
            )
            response = await self._execute(request, label="watch_history")
            return [
                video
                for video in (
                    _parse_playlist_item(item) for item in response.get("items", [])
                )
                if video is not None
            ]

        return await self.cache.get_or_load(WATCH_HISTORY_CACHE_KEY, self.history_ttl, load)

    async def recommended(self, limit: int = 20) -> list[VideoSummary]:
        """Most popular videos for the configured region."""
        client = self.authorized()
        request = client.videos().list(
            chart="mostPopular",
            regionCode=self.region_code,
            maxResults=limit,
            part="snippet,statistics",
        )
        response = await self._execute(request, label="recommended")
        return [
            video
            for video in (_parse_video_item(item) for item in response.get("items", []))
            if video is not None
        ]

    async def like(self, video_id: str) -> None:
        """Rate ``video_id`` as liked on the delegated account."""
        client = self.authorized()
        await self._execute(client.videos().rate(id=video_id, rating="like"), label="like")
        logger.info("youtube_video_liked video_id=%s", video_id)

    async def save_for_later(self, video_id: str) -> PlaylistInsertResult:
        """Add ``video_id`` to the agent's own watch-later playlist.

        The playlist is looked up by title and created on first use.
        """
        client = self.authorized()
        playlist_id = await self._get_or_create_playlist(client, self.playlist_title)
        return await self._insert_playlist_item(client, playlist_id, video_id)

    async def add_to_playlist(self, video_id: str, playlist_id: str) -> PlaylistInsertResult:
        """Add ``video_id`` to an existing playlist."""
        client = self.authorized()
        return await self._insert_playlist_item(client, playlist_id, video_id)

    async def _get_or_create_playlist(self, client: Any, title: str) -> str:
        lists = await self._execute(
            client.playlists().list(part="snippet", mine=True, maxResults=50),
            label="playlists_list",
        )
        for playlist in lists.get("items", []):
            if playlist.get("snippet", {}).get("title") == title:
                return str(playlist["id"])

        created = await self._execute(
            client.playlists().insert(
                part="snippet",
                body={
                    "snippet": {
                        "title": title,
                        "description": "Videos saved from the YouTube chat agent",
                    }
                },
            ),
            label="playlists_insert",
        )
        logger.info("youtube_playlist_created title=%s id=%s", title, created.get("id"))
        return str(created["id"])

    async def _insert_playlist_item(
        self, client: Any, playlist_id: str, video_id: str
    ) -> PlaylistInsertResult:
        item = await self._execute(
            client.playlistItems().insert(
                part="snippet",
                body={
                    "snippet": {
                        "playlistId": playlist_id,
                        "resourceId": {"kind": "youtube#video", "videoId": video_id},
                    }
                },
            ),
            label="playlist_items_insert",
        )
        return PlaylistInsertResult(playlist_id=playlist_id, video_id=video_id, item=item or {})

    async def _execute(self, request: Any, label: str) -> dict[str, Any]:
        """Run a prepared API request off the event loop.

        Raises:
            UpstreamServiceError: On any HTTP error from the API.
        """
        execute: Callable[[], Any] = request.execute
        try:
            response = await asyncio.to_thread(execute)
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            logger.warning("youtube_api_error op=%s status=%s reason=%s", label, status, e.reason)
            raise UpstreamServiceError(
                f"YouTube API error: {e.reason}",
                status_code=int(status) if status else None,
                details=_error_body(e),
            ) from e
        return response or {}


def _best_thumbnail(snippet: dict[str, Any]) -> str | None:
    thumbnails = snippet.get("thumbnails", {})
    return (
        thumbnails.get("high", {}).get("url")
        or thumbnails.get("medium", {}).get("url")
        or thumbnails.get("default", {}).get("url")
    )


def _parse_search_item(item: dict[str, Any]) -> VideoSummary | None:
    video_id = item.get("id", {}).get("videoId")
    if not video_id:
        return None
    snippet = item.get("snippet", {})
    return VideoSummary(
        id=video_id,
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        thumbnail_url=_best_thumbnail(snippet),
        channel_name=snippet.get("channelTitle"),
    )


def _parse_playlist_item(item: dict[str, Any]) -> VideoSummary | None:
    snippet = item.get("snippet", {})
    video_id = (
        item.get("contentDetails", {}).get("videoId")
        or snippet.get("resourceId", {}).get("videoId")
    )
    if not video_id:
        return None
    return VideoSummary(
        id=video_id,
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        thumbnail_url=_best_thumbnail(snippet),
        channel_name=snippet.get("videoOwnerChannelTitle") or snippet.get("channelTitle"),
    )


def _parse_video_item(item: dict[str, Any]) -> VideoSummary | None:
    video_id = item.get("id")
    if not isinstance(video_id, str) or not video_id:
        return None
    snippet = item.get("snippet", {})
    return VideoSummary(
        id=video_id,
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        thumbnail_url=_best_thumbnail(snippet),
        channel_name=snippet.get("channelTitle"),
    )


def _error_body(error: HttpError) -> Any:
    content = getattr(error, "content", b"")
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content
