"""Scoring models: a video with its score, and tag frequency rows."""

from typing import List

from pydantic import BaseModel

from .video import Video


class ScoredVideo(BaseModel):
    """A video with its time-decay score and its position in the input list."""

    video: Video
    original_index: int
    score: float


class TagFrequency(BaseModel):
    """How often a tag appears among the top-scored videos, and where."""

    tag: str
    count: int
    videos: List[str]
