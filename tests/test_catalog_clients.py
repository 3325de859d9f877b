"""Tests for the Spotify and YouTube clients, driven through httpx.MockTransport."""
from __future__ import annotations

import httpx
import pytest

from chordsmith.models.tracks import PLACEHOLDER_ART_URL
from chordsmith.services.spotify import SpotifyClient, track_id_from_uri
from chordsmith.services.youtube import YouTubeClient, video_query

_TRACK = {
    "uri": "spotify:track:abc",
    "name": "Perfect",
    "artists": [{"name": "Ed Sheeran"}],
    "album": {"name": "÷", "images": [{"url": "https://img/1.jpg"}]},
    "preview_url": None,
}


class SpotifyStub:
    """Fake Spotify accounts + Web API endpoints."""

    def __init__(self, token_status: int = 200):
        self.token_status = token_status
        self.token_requests = 0
        self.api_requests: list[httpx.Request] = []
        self.reject_next_api_call = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/token":
            self.token_requests += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status)
            return httpx.Response(200, json={"access_token": f"tok-{self.token_requests}", "expires_in": 3600})

        self.api_requests.append(request)
        if self.reject_next_api_call:
            self.reject_next_api_call = False
            return httpx.Response(401)
        if request.url.path == "/v1/tracks/abc":
            return httpx.Response(200, json=_TRACK)
        if request.url.path == "/v1/search":
            return httpx.Response(200, json={"tracks": {"items": [_TRACK, {**_TRACK, "uri": "spotify:track:x", "album": {}}]}})
        return httpx.Response(404)


def _spotify(stub: SpotifyStub, **kwargs) -> SpotifyClient:
    params = dict(
        client_id="id",
        client_secret="secret",
        api_url="https://api.spotify.com/v1",
        token_url="https://accounts.spotify.com/api/token",
        timeout=5,
        transport=httpx.MockTransport(stub),
    )
    params.update(kwargs)
    return SpotifyClient(**params)


# ---------------------------------------------------------------------------
# Spotify
# ---------------------------------------------------------------------------


class TestSpotifyClient:

    def test_track_id_from_uri(self) -> None:
        assert track_id_from_uri("spotify:track:abc") == "abc"
        assert track_id_from_uri("local:file:x.mp3") is None

    @pytest.mark.asyncio
    async def test_get_track(self) -> None:
        stub = SpotifyStub()
        client = _spotify(stub)
        track = await client.get_track("spotify:track:abc")
        await client.close()

        assert track is not None
        assert track.name == "Perfect"
        assert track.artists == ["Ed Sheeran"]
        assert track.art == "https://img/1.jpg"
        assert stub.api_requests[0].headers["Authorization"] == "Bearer tok-1"

    @pytest.mark.asyncio
    async def test_token_is_reused(self) -> None:
        stub = SpotifyStub()
        client = _spotify(stub)
        await client.get_track("spotify:track:abc")
        await client.get_track("spotify:track:abc")
        await client.close()
        assert stub.token_requests == 1

    @pytest.mark.asyncio
    async def test_401_drops_token(self) -> None:
        stub = SpotifyStub()
        client = _spotify(stub)
        await client.get_track("spotify:track:abc")
        stub.reject_next_api_call = True
        assert await client.get_track("spotify:track:abc") is None
        assert await client.get_track("spotify:track:abc") is not None
        await client.close()
        assert stub.token_requests == 2

    @pytest.mark.asyncio
    async def test_unknown_track_returns_none(self) -> None:
        client = _spotify(SpotifyStub())
        assert await client.get_track("spotify:track:missing") is None
        assert await client.get_track("local:file:x.mp3") is None
        await client.close()

    @pytest.mark.asyncio
    async def test_missing_credentials_never_raise(self) -> None:
        stub = SpotifyStub()
        client = SpotifyClient(client_id="", client_secret="", transport=httpx.MockTransport(stub))
        client.client_id = None
        client.client_secret = None
        assert await client.get_track("spotify:track:abc") is None
        assert await client.search_tracks("perfect") == []
        assert await client.health_check() is False
        assert stub.token_requests == 0

    @pytest.mark.asyncio
    async def test_token_failure_is_absorbed(self) -> None:
        client = _spotify(SpotifyStub(token_status=500))
        assert await client.get_track("spotify:track:abc") is None
        await client.close()

    @pytest.mark.asyncio
    async def test_search_tracks(self) -> None:
        stub = SpotifyStub()
        client = _spotify(stub)
        tracks = await client.search_tracks("perfect", limit=5)
        await client.close()

        assert [t.uri for t in tracks] == ["spotify:track:abc", "spotify:track:x"]
        assert tracks[1].art == PLACEHOLDER_ART_URL
        assert stub.api_requests[0].url.params["limit"] == "5"
        assert stub.api_requests[0].url.params["type"] == "track"

    @pytest.mark.asyncio
    async def test_empty_search_skips_request(self) -> None:
        stub = SpotifyStub()
        client = _spotify(stub)
        assert await client.search_tracks("") == []
        assert stub.api_requests == []


# ---------------------------------------------------------------------------
# YouTube
# ---------------------------------------------------------------------------


class TestYouTubeClient:

    def test_video_query(self) -> None:
        assert video_query("Perfect", "Ed Sheeran") == "Perfect Ed Sheeran official audio"

    @pytest.mark.asyncio
    async def test_search_video(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"items": [{"id": {"videoId": "vid123"}}]})

        client = YouTubeClient(api_key="key", api_url="https://yt/v3", timeout=5, transport=httpx.MockTransport(handler))
        assert await client.search_video("Perfect Ed Sheeran official audio") == "vid123"
        await client.close()
        assert seen[0].url.params["q"] == "Perfect Ed Sheeran official audio"
        assert seen[0].url.params["maxResults"] == "1"

    @pytest.mark.asyncio
    async def test_no_results_or_errors_return_none(self) -> None:
        empty = YouTubeClient(api_key="key", api_url="https://yt/v3", timeout=5,
                              transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"items": []})))
        failing = YouTubeClient(api_key="key", api_url="https://yt/v3", timeout=5,
                                transport=httpx.MockTransport(lambda r: httpx.Response(403)))
        assert await empty.search_video("q") is None
        assert await failing.search_video("q") is None
        await empty.close()
        await failing.close()

    @pytest.mark.asyncio
    async def test_missing_key_returns_none(self) -> None:
        client = YouTubeClient(api_key="", api_url="https://yt/v3", timeout=5)
        client.api_key = None
        assert await client.search_video("q") is None
