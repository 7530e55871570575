"""Tests for the YouTube Data API facade."""

from unittest.mock import MagicMock, patch

import httplib2
import pytest
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.errors import HttpError

from youtube_chat_agent.api.youtube_service import (
    WATCH_HISTORY_CACHE_KEY,
    YouTubeService,
    _parse_playlist_item,
    _parse_search_item,
    _parse_video_item,
)
from youtube_chat_agent.errors import UpstreamAuthError, UpstreamServiceError


def search_item(video_id, title="Kubernetes in 100 seconds"):
    return {
        "id": {"kind": "youtube#video", "videoId": video_id},
        "snippet": {
            "title": title,
            "description": "Learn Kubernetes",
            "channelTitle": "Fireship",
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"},
            },
        },
    }


def http_error(status, message="quotaExceeded"):
    return HttpError(
        resp=httplib2.Response({"status": status}),
        content=f'{{"error": {{"message": "{message}"}}}}'.encode(),
    )


@pytest.fixture
def service(settings, credential_manager, cache):
    service = YouTubeService(credential_manager, cache, settings=settings)
    service._public = MagicMock()
    return service


class TestParsers:
    def test_search_item(self):
        video = _parse_search_item(search_item("abc123"))

        assert video.id == "abc123"
        assert video.title == "Kubernetes in 100 seconds"
        assert video.channel_name == "Fireship"
        assert video.thumbnail_url == "https://i.ytimg.com/vi/abc123/hqdefault.jpg"
        assert video.url == "https://www.youtube.com/watch?v=abc123"

    def test_search_item_without_video_id(self):
        assert _parse_search_item({"id": {"kind": "youtube#channel"}, "snippet": {}}) is None

    def test_missing_snippet_fields(self):
        video = _parse_search_item({"id": {"videoId": "x"}})

        assert video.title == ""
        assert video.description == ""
        assert video.thumbnail_url is None
        assert video.channel_name is None

    def test_thumbnail_fallback_to_medium(self):
        item = search_item("abc")
        item["snippet"]["thumbnails"] = {"medium": {"url": "m.jpg"}, "default": {"url": "d.jpg"}}

        assert _parse_search_item(item).thumbnail_url == "m.jpg"

    def test_playlist_item(self):
        item = {
            "snippet": {
                "title": "Watched",
                "videoOwnerChannelTitle": "Owner",
                "resourceId": {"videoId": "fromResource"},
            },
            "contentDetails": {"videoId": "fromDetails"},
        }

        video = _parse_playlist_item(item)

        assert video.id == "fromDetails"
        assert video.channel_name == "Owner"

    def test_video_item(self):
        video = _parse_video_item({"id": "pop1", "snippet": {"title": "Trending"}})

        assert video.id == "pop1"
        assert _parse_video_item({"id": {"videoId": "nested"}}) is None


class TestSearch:
    @pytest.mark.asyncio
    async def test_search_videos(self, service):
        request = service._public.search.return_value.list.return_value
        request.execute.return_value = {
            "items": [
                search_item("v1"),
                {"id": {"kind": "youtube#playlist", "playlistId": "p"}},
                search_item("v2"),
            ]
        }

        videos = await service.search_videos("Kubernetes", 6)

        assert [v.id for v in videos] == ["v1", "v2"]
        service._public.search.return_value.list.assert_called_once_with(
            q="Kubernetes", type="video", part="snippet", maxResults=6
        )

    @pytest.mark.asyncio
    async def test_search_without_api_key(self, credential_manager, cache, settings):
        settings.youtube_api_key = ""
        service = YouTubeService(credential_manager, cache, settings=settings)

        with pytest.raises(UpstreamServiceError, match="YOUTUBE_API_KEY"):
            await service.search_videos("Kubernetes", 6)

    @pytest.mark.asyncio
    async def test_http_error_mapped(self, service):
        request = service._public.search.return_value.list.return_value
        request.execute.side_effect = http_error(403)

        with pytest.raises(UpstreamServiceError) as exc_info:
            await service.search_videos("Kubernetes", 6)

        assert exc_info.value.status_code == 403
        assert "quotaExceeded" in exc_info.value.details


class TestAccountOperations:
    @pytest.mark.asyncio
    async def test_no_credential_raises_auth_error(self, service):
        with pytest.raises(UpstreamAuthError):
            await service.like("abc")

    @pytest.mark.asyncio
    async def test_watch_history_is_cached(self, service, clock):
        client = MagicMock()
        request = client.playlistItems.return_value.list.return_value
        request.execute.return_value = {
            "items": [{"snippet": {"title": "Seen"}, "contentDetails": {"videoId": "h1"}}]
        }

        with patch.object(service, "authorized", return_value=client) as authorized:
            first = await service.watch_history()
            second = await service.watch_history()
            clock.advance(31)
            third = await service.watch_history()

        assert [v.id for v in first] == ["h1"]
        assert first == second == third
        assert request.execute.call_count == 2
        assert authorized.call_count == 2
        client.playlistItems.return_value.list.assert_called_with(
            playlistId="HL", part="snippet,contentDetails", maxResults=25
        )
        assert WATCH_HISTORY_CACHE_KEY in service.cache

    @pytest.mark.asyncio
    async def test_recommended_uses_region(self, service):
        client = MagicMock()
        client.videos.return_value.list.return_value.execute.return_value = {
            "items": [{"id": "pop1", "snippet": {"title": "Popular"}}]
        }

        with patch.object(service, "authorized", return_value=client):
            videos = await service.recommended()

        assert [v.id for v in videos] == ["pop1"]
        kwargs = client.videos.return_value.list.call_args.kwargs
        assert kwargs["chart"] == "mostPopular"
        assert kwargs["regionCode"] == "IN"

    @pytest.mark.asyncio
    async def test_like(self, service):
        client = MagicMock()

        with patch.object(service, "authorized", return_value=client):
            await service.like("abc")

        client.videos.return_value.rate.assert_called_once_with(id="abc", rating="like")

    @pytest.mark.asyncio
    async def test_save_for_later_reuses_playlist(self, service):
        client = MagicMock()
        client.playlists.return_value.list.return_value.execute.return_value = {
            "items": [
                {"id": "PLother", "snippet": {"title": "Music"}},
                {"id": "PLagent", "snippet": {"title": "Watch Later (Agent)"}},
            ]
        }
        client.playlistItems.return_value.insert.return_value.execute.return_value = {
            "id": "item1"
        }

        with patch.object(service, "authorized", return_value=client):
            result = await service.save_for_later("abc")

        assert result.playlist_id == "PLagent"
        assert result.video_id == "abc"
        assert result.item == {"id": "item1"}
        client.playlists.return_value.insert.assert_not_called()
        body = client.playlistItems.return_value.insert.call_args.kwargs["body"]
        assert body["snippet"]["resourceId"] == {"kind": "youtube#video", "videoId": "abc"}

    @pytest.mark.asyncio
    async def test_save_for_later_creates_playlist(self, service):
        client = MagicMock()
        client.playlists.return_value.list.return_value.execute.return_value = {"items": []}
        client.playlists.return_value.insert.return_value.execute.return_value = {"id": "PLnew"}
        client.playlistItems.return_value.insert.return_value.execute.return_value = {}

        with patch.object(service, "authorized", return_value=client):
            result = await service.save_for_later("abc")

        assert result.playlist_id == "PLnew"
        insert_body = client.playlists.return_value.insert.call_args.kwargs["body"]
        assert insert_body["snippet"]["title"] == "Watch Later (Agent)"

    @pytest.mark.asyncio
    async def test_add_to_playlist(self, service):
        client = MagicMock()
        client.playlistItems.return_value.insert.return_value.execute.return_value = {"id": "i"}

        with patch.object(service, "authorized", return_value=client):
            result = await service.add_to_playlist("abc", "PLmine")

        assert result.playlist_id == "PLmine"
        client.playlists.assert_not_called()

    def test_authorized_builds_client_with_credentials(self, service, authenticated_manager):
        service.credentials = authenticated_manager

        with patch("youtube_chat_agent.api.youtube_service.build") as build:
            service.authorized()

        assert build.call_args.args == ("youtube", "v3")
        http = build.call_args.kwargs["http"]
        assert isinstance(http, AuthorizedHttp)
        assert http.credentials.token == "access-123"
        assert http.http.timeout == 30

    def test_public_client_uses_api_key_and_timeout(self, settings, credential_manager, cache):
        settings.api_timeout_seconds = 12
        service = YouTubeService(credential_manager, cache, settings=settings)

        with patch("youtube_chat_agent.api.youtube_service.build") as build:
            service.public
            service.public

        build.assert_called_once()
        assert build.call_args.kwargs["developerKey"] == "test-youtube-key"
        assert build.call_args.kwargs["http"].timeout == 12
