"""
YouTube video source: resolve a channel reference and fetch its recent uploads.

Thin client over the YouTube Data API v3 (channels, playlistItems, videos).
Returns algorithm Video models so fetched data goes straight into ranking.
API errors are mapped to VideoSourceError with a type and HTTP status.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests

from algorithm.models.video import Video

from ..models.analysis import ChannelInfo
from .errors import VideoSourceError

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
YOUTUBE_HOSTS = {"youtube.com", "www.youtube.com", "m.youtube.com"}
MAX_PAGE_SIZE = 50  # API limit for playlistItems and videos?id=

# (reasons, statuses, message fragments) -> (error_type, http status), first match wins
_ERROR_MAPPINGS: List[Tuple[Tuple[str, ...], Tuple[int, ...], Tuple[str, ...], str, int]] = [
    (("quotaExceeded", "dailyLimitExceeded"), (), ("quota",), "YOUTUBE_QUOTA", 429),
    (("rateLimitExceeded",), (429,), (), "RATE_LIMIT", 429),
    (("keyInvalid",), (401,), ("API key",), "API_CONFIG", 401),
    (("channelNotFound",), (404,), (), "CHANNEL_NOT_FOUND", 404),
    (("channelForbidden", "forbidden"), (403,), (), "YOUTUBE_API_ERROR", 403),
]


def parse_channel_ref(text: str) -> Tuple[str, str]:
    """
    Classify a channel reference as ("id", ...), ("handle", "@..."), or ("username", ...).

    Accepts a raw channel id (UC...), an @handle, or a youtube.com URL of the
    /channel/, /@, /c/ or /user/ forms.
    """
    ref = (text or "").strip()
    if not ref:
        raise VideoSourceError("Channel reference is empty", "INVALID_URL", 400)
    if ref.startswith("@"):
        return "handle", ref
    if ref.startswith("UC") and len(ref) == 24 and "/" not in ref:
        return "id", ref
    parsed = urlparse(ref if "://" in ref else f"https://{ref}")
    if parsed.hostname in YOUTUBE_HOSTS:
        parts = [p for p in parsed.path.split("/") if p]
        if len(parts) >= 2 and parts[0] == "channel":
            return "id", parts[1]
        if parts and parts[0].startswith("@"):
            return "handle", parts[0]
        if len(parts) >= 2 and parts[0] in ("c", "user"):
            return "username", parts[1]
    raise VideoSourceError(f"Not a YouTube channel reference: {ref!r}", "INVALID_URL", 400)


def _map_error(status: int, body: Any) -> VideoSourceError:
    error = body.get("error", {}) if isinstance(body, dict) else {}
    message = error.get("message") or f"YouTube API returned HTTP {status}"
    errors = error.get("errors") or [{}]
    reason = errors[0].get("reason", "") if isinstance(errors[0], dict) else ""
    for reasons, statuses, fragments, error_type, http_status in _ERROR_MAPPINGS:
        if reason in reasons or status in statuses or any(f.lower() in message.lower() for f in fragments):
            return VideoSourceError(message, error_type, http_status)
    return VideoSourceError(message, "YOUTUBE_API_ERROR", 500)


def _best_thumbnail(thumbnails: Dict[str, Any]) -> Optional[str]:
    for size in ("maxres", "high", "medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return None


class YouTubeVideoSource:
    """Fetch channel metadata and recent videos with an API key."""

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        base_url: str = YOUTUBE_API_BASE,
    ):
        if not api_key:
            raise ValueError("YouTube API key is required")
        self._api_key = api_key
        self._session = session or requests.Session()
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

    def _get(self, endpoint: str, **params: Any) -> Dict[str, Any]:
        params["key"] = self._api_key
        try:
            resp = self._session.get(f"{self._base_url}/{endpoint}", params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise VideoSourceError(f"YouTube API request failed: {e}", "YOUTUBE_API_ERROR", 502) from e
        try:
            body = resp.json()
        except ValueError:
            body = None
        if resp.status_code >= 400:
            err = _map_error(resp.status_code, body)
            logger.error("[youtube] %s %s -> %s (%s)", endpoint, resp.status_code, err.error_type, err)
            raise err
        if not isinstance(body, dict):
            raise VideoSourceError(f"YouTube API returned a non-JSON body for {endpoint}", "YOUTUBE_API_ERROR", 502)
        return body

    def resolve_channel(self, ref: str) -> ChannelInfo:
        """Look up a channel by id, @handle, or legacy username."""
        kind, value = parse_channel_ref(ref)
        lookup = {"id": "id", "handle": "forHandle", "username": "forUsername"}[kind]
        body = self._get("channels", part="snippet,statistics,contentDetails", **{lookup: value})
        items = body.get("items") or []
        if not items:
            raise VideoSourceError(f"YouTube channel not found: {ref}", "CHANNEL_NOT_FOUND", 404)
        item = items[0]
        snippet = item.get("snippet", {})
        stats = item.get("statistics", {})
        uploads = item.get("contentDetails", {}).get("relatedPlaylists", {}).get("uploads")
        return ChannelInfo(
            channel_id=item["id"],
            title=snippet.get("title", ""),
            handle=snippet.get("customUrl"),
            description=snippet.get("description"),
            avatar=_best_thumbnail(snippet.get("thumbnails", {})),
            subscriber_count=int(stats.get("subscriberCount") or 0),
            video_count=int(stats.get("videoCount") or 0),
            view_count=int(stats.get("viewCount") or 0),
            uploads_playlist_id=uploads,
        )

    def _upload_ids(self, playlist_id: str, max_results: int) -> List[str]:
        ids: List[str] = []
        page_token: Optional[str] = None
        while len(ids) < max_results:
            params: Dict[str, Any] = {
                "part": "contentDetails",
                "playlistId": playlist_id,
                "maxResults": min(MAX_PAGE_SIZE, max_results - len(ids)),
            }
            if page_token:
                params["pageToken"] = page_token
            body = self._get("playlistItems", **params)
            for item in body.get("items") or []:
                vid = item.get("contentDetails", {}).get("videoId")
                if vid:
                    ids.append(vid)
            page_token = body.get("nextPageToken")
            if not page_token:
                break
        return ids[:max_results]

    def get_recent_videos(self, channel: ChannelInfo, max_results: int = 50) -> List[Video]:
        """Newest uploads of a channel with statistics, newest first."""
        if not channel.uploads_playlist_id:
            raise VideoSourceError(f"Channel {channel.channel_id} has no uploads playlist", "CHANNEL_NOT_FOUND", 404)
        ids = self._upload_ids(channel.uploads_playlist_id, max_results)
        videos: List[Video] = []
        for start in range(0, len(ids), MAX_PAGE_SIZE):
            chunk = ids[start:start + MAX_PAGE_SIZE]
            body = self._get("videos", part="snippet,statistics,contentDetails", id=",".join(chunk))
            for item in body.get("items") or []:
                snippet = item.get("snippet", {})
                if not snippet.get("publishedAt"):
                    continue
                stats = item.get("statistics", {})
                like_count = stats.get("likeCount")
                videos.append(Video(
                    video_id=item["id"],
                    title=snippet.get("title", ""),
                    published_at=snippet.get("publishedAt", ""),
                    view_count=stats.get("viewCount"),
                    like_count=int(like_count) if like_count is not None else None,
                    tags=snippet.get("tags") or [],
                    thumbnail=_best_thumbnail(snippet.get("thumbnails", {})),
                    duration=item.get("contentDetails", {}).get("duration"),
                    url=f"https://www.youtube.com/watch?v={item['id']}",
                ))
        videos.sort(key=lambda v: v.published_at, reverse=True)
        logger.info("[youtube] fetched %d videos for %s", len(videos), channel.channel_id)
        return videos
