"""
Analysis generator: turn a channel and its ranked videos into a report payload via an LLM.

Uses LiteLLM so the model is a config string (default Gemini). The reply must
be a JSON object; parse_json_response accepts it bare, fenced, or embedded
in prose.

Usage:
    generator = LiteLLMAnalysisGenerator(model="gemini/gemini-2.5-flash", api_key=key)
    payload = await generator.generate(channel, ranked, tags)
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Protocol

import litellm
from litellm import acompletion

from algorithm.models.scoring import ScoredVideo, TagFrequency

from ..models.analysis import ChannelInfo
from .errors import AnalysisError

logger = logging.getLogger(__name__)

# Suppress LiteLLM's verbose logging
litellm.suppress_debug_info = True

# Drop unsupported params for models with restrictions
litellm.drop_params = True

DEFAULT_MODEL = "gemini/gemini-2.5-flash"

# Videos listed in the request, best score first
PROMPT_VIDEO_LIMIT = 20


class AnalysisGenerator(Protocol):
    """Protocol for report generation. Implement for LiteLLM or a canned generator in tests."""

    async def generate(
        self,
        channel: ChannelInfo,
        ranked: List[ScoredVideo],
        tags: List[TagFrequency],
    ) -> Dict[str, Any]:
        """Return the report payload (a JSON object) for one channel."""
        ...


def parse_json_response(content: str) -> Dict[str, Any]:
    """
    Parse a JSON object from an LLM reply.

    Tries, in order: the whole reply, a ```json fenced block, the outermost
    {...} span. Raises AnalysisError if none is a JSON object.
    """
    content = (content or "").strip()
    candidates = [content]
    fenced = re.search(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", content)
    if fenced:
        candidates.append(fenced.group(1))
    braces = re.search(r"\{[\s\S]*\}", content)
    if braces:
        candidates.append(braces.group())
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    raise AnalysisError(f"Could not parse JSON from response: {content[:200]}...")


def build_prompt(channel: ChannelInfo, ranked: List[ScoredVideo], tags: List[TagFrequency]) -> str:
    """Request body for the model: channel facts, top videos by score, top tags."""
    data = {
        "channel": {
            "title": channel.title,
            "handle": channel.handle,
            "description": channel.description,
            "subscribers": channel.subscriber_count,
            "videos": channel.video_count,
            "views": channel.view_count,
        },
        "top_videos": [
            {
                "title": s.video.title,
                "published_at": s.video.published_at,
                "views": s.video.view_count,
                "likes": s.video.like_count,
                "duration": s.video.duration,
                "score": round(s.score, 2),
            }
            for s in ranked[:PROMPT_VIDEO_LIMIT]
        ],
        "top_tags": [{"tag": t.tag, "count": t.count} for t in tags],
    }
    return (
        "You are a marketing analyst. Analyze this YouTube channel and reply with one JSON object "
        "with keys executive_summary, strengths, weaknesses_opportunities, content_focus, "
        "funnel_analysis, and video_ideas.\n\n"
        f"{json.dumps(data, ensure_ascii=False)}"
    )


class LiteLLMAnalysisGenerator:
    """Generate report payloads through any LiteLLM-supported model."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        temperature: float = 0.7,
        timeout: float = 120.0,
    ):
        self.model = model
        self._api_key = api_key
        self._temperature = temperature
        self._timeout = timeout

    async def generate(
        self,
        channel: ChannelInfo,
        ranked: List[ScoredVideo],
        tags: List[TagFrequency],
    ) -> Dict[str, Any]:
        prompt = build_prompt(channel, ranked, tags)
        try:
            response = await acompletion(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
                response_format={"type": "json_object"},
                timeout=self._timeout,
                api_key=self._api_key,
            )
        except Exception as e:
            logger.error("[analysis] %s call failed for %s: %s", self.model, channel.channel_id, e)
            raise AnalysisError(f"{self.model} call failed: {e}") from e
        content = response.choices[0].message.content
        analysis = parse_json_response(content)
        logger.info("[analysis] generated %d sections for %s", len(analysis), channel.channel_id)
        return analysis
