"""
Analyze Flow Tests

POST /api/analyze with a canned video source and analysis generator, plus
the generator's JSON reply parsing and prompt building.

Scenarios:
----------
1. Channel with live cached reports: returns them (cached=True) without fetching
2. force=True or no cache: fetch, rank, generate, save; alias recorded
3. Missing collaborators answer 503; source and generator failures map to HTTP
4. Cache reads and writes run in the threadpool, not on the event loop
5. LLM replies parse bare, fenced, or embedded in prose

Run:
----
    pytest server/tests/test_analyze.py -v
"""

import threading

import pytest

from algorithm.ranking import rank_videos, tag_frequency
from server.config import ServerConfig
from server.models import ChannelInfo
from server.services import AnalysisError, MemoryKeyValueStore, VideoSourceError, parse_json_response
from server.services.analysis_generator import PROMPT_VIDEO_LIMIT, build_prompt
from server.state import AppState, set_state

CHANNEL_ID = "UC" + "b" * 22
CHANNEL = ChannelInfo(
    channel_id=CHANNEL_ID,
    title="Brand Channel",
    handle="@brand",
    avatar="avatar.jpg",
    uploads_playlist_id="UU" + "b" * 22,
)
VIDEOS = [
    {"video_id": "v1", "title": "One", "published_at": "2026-10-18T00:00:00Z", "view_count": 10, "tags": ["x"]},
    {"video_id": "v2", "title": "Two", "published_at": "2026-10-10T00:00:00Z", "view_count": 90_000, "tags": ["y", "x"]},
]


class FakeVideoSource:
    def __init__(self, error=None):
        self.error = error
        self.resolved = []

    def resolve_channel(self, ref):
        self.resolved.append(ref)
        if self.error:
            raise self.error
        return CHANNEL

    def get_recent_videos(self, channel, max_results=50):
        return VIDEOS[:max_results]


class FakeGenerator:
    def __init__(self, error=None):
        self.error = error
        self.calls = 0
        self.loop_thread = None

    async def generate(self, channel, ranked, tags):
        self.calls += 1
        self.loop_thread = threading.get_ident()
        if self.error:
            raise self.error
        return {"executive_summary": f"{channel.title}: {len(ranked)} videos", "top_tag": tags[0].tag}


class ThreadRecordingStore(MemoryKeyValueStore):
    """Memory store that remembers which threads touched it."""

    def __init__(self):
        super().__init__()
        self.threads = set()

    def get(self, key):
        self.threads.add(threading.get_ident())
        return super().get(key)

    def set(self, key, value):
        self.threads.add(threading.get_ident())
        super().set(key, value)

    def keys(self):
        self.threads.add(threading.get_ident())
        return super().keys()


@pytest.fixture
def storage():
    return ThreadRecordingStore()


@pytest.fixture
def source():
    return FakeVideoSource()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def app_state(storage, cache, source, generator):
    state = AppState(
        ServerConfig(report_cache_backend="memory"),
        storage=storage,
        video_source=source,
        analysis_generator=generator,
    )
    state.report_cache = cache
    set_state(state)
    yield state
    set_state(None)


class TestAnalyzeRoute:

    def test_fresh_analysis_saved(self, client, cache, source, generator):
        resp = client.post("/api/analyze", json={"channel": "@brand"})
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["cached"] is False
        assert body["channel_id"] == CHANNEL_ID
        report = body["report"]
        assert report["brand_name"] == "Brand Channel"
        assert report["channel_avatar"] == "avatar.jpg"
        assert report["payload"]["analysis"]["top_tag"] == "x"
        assert [v["video"]["video_id"] for v in report["payload"]["videos"]] == ["v2", "v1"]
        assert generator.calls == 1
        assert cache.resolve_channel_id("@brand") == CHANNEL_ID
        assert len(cache.list_reports_for_channel(CHANNEL_ID)) == 1

    def test_cached_reports_short_circuit(self, client, cache, source, generator):
        cache.save(CHANNEL_ID, {"brand_name": "Brand Channel"})
        body = client.post("/api/analyze", json={"channel": CHANNEL_ID}).json()
        assert body["cached"] is True
        assert body["report"] is None
        assert len(body["cached_reports"]) == 1
        assert source.resolved == []
        assert generator.calls == 0

    def test_known_alias_short_circuit(self, client, cache, source):
        cache.set_channel_alias("@brand", CHANNEL_ID)
        cache.save(CHANNEL_ID, {"brand_name": "Brand Channel"})
        body = client.post("/api/analyze", json={"channel": "@Brand"}).json()
        assert body["cached"] is True
        assert source.resolved == []

    def test_force_reanalyzes(self, client, cache, clock, generator):
        cache.save(CHANNEL_ID, {"brand_name": "Brand Channel"})
        clock.advance(1000)
        body = client.post("/api/analyze", json={"channel": CHANNEL_ID, "force": True}).json()
        assert body["cached"] is False
        assert generator.calls == 1
        assert len(cache.list_reports_for_channel(CHANNEL_ID)) == 2

    def test_invalid_reference_400(self, client):
        resp = client.post("/api/analyze", json={"channel": "https://example.com/nope"})
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_type"] == "INVALID_URL"

    def test_video_source_error_mapped(self, client, source):
        source.error = VideoSourceError("quota", "YOUTUBE_QUOTA", 429)
        resp = client.post("/api/analyze", json={"channel": "@brand"})
        assert resp.status_code == 429
        assert resp.json()["detail"] == {"error_type": "YOUTUBE_QUOTA", "message": "quota"}

    def test_generator_failure_502_and_nothing_saved(self, client, cache, generator):
        generator.error = AnalysisError("model down")
        assert client.post("/api/analyze", json={"channel": "@brand"}).status_code == 502
        assert cache.list_channels() == []

    def test_unconfigured_503(self, client, app_state):
        app_state.video_source = None
        assert client.post("/api/analyze", json={"channel": "@brand"}).status_code == 503

    def test_cache_calls_stay_off_the_event_loop(self, client, storage, generator):
        storage.threads.clear()
        assert client.post("/api/analyze", json={"channel": "@brand"}).status_code == 200
        assert generator.loop_thread is not None
        assert storage.threads
        assert generator.loop_thread not in storage.threads


class TestParseJsonResponse:

    def test_bare(self):
        assert parse_json_response('{"a": 1}') == {"a": 1}

    def test_fenced(self):
        assert parse_json_response('Here it is:\n```json\n{"a": [1, 2]}\n```') == {"a": [1, 2]}

    def test_embedded_in_prose(self):
        assert parse_json_response('Sure! {"a": {"b": 2}} Hope that helps.') == {"a": {"b": 2}}

    @pytest.mark.parametrize("reply", ["", "no json here", "[1, 2, 3]", "{broken"])
    def test_unparseable(self, reply):
        with pytest.raises(AnalysisError):
            parse_json_response(reply)


class TestBuildPrompt:

    def test_contains_channel_and_ranked_videos(self):
        ranked = rank_videos(VIDEOS * 15, "2026-10-19T00:00:00Z")
        prompt = build_prompt(CHANNEL, ranked, tag_frequency(ranked[:10]))
        assert "Brand Channel" in prompt
        assert "executive_summary" in prompt
        assert prompt.count('"title": "Two"') + prompt.count('"title": "One"') == PROMPT_VIDEO_LIMIT
