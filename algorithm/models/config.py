"""
Ranking configuration: score formula constants and highlight/tag/page sizes.

RankingConfig defaults are defined here. The server may pass a dict
(e.g. from environment overrides); from_dict() merges it with these defaults.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator


class RankingConfig(BaseModel):
    """Configuration for the time-decay ranking."""

    # -------------------------------------------------------------------------
    # Score formula
    # score = (views + 1) / (max(min_age_hours, age_hours) + age_offset_hours) ** gravity
    # -------------------------------------------------------------------------

    # Decay exponent. Higher = old videos fall off faster.
    gravity: float = Field(default=1.8, gt=0)

    # Added to the age before the power. Softens the curve for brand-new uploads.
    age_offset_hours: float = Field(default=2.0, ge=0)

    # Age floor. Fresh or future-dated uploads are treated as this old.
    min_age_hours: float = Field(default=1.0, gt=0)

    # -------------------------------------------------------------------------
    # Consumers of the score
    # -------------------------------------------------------------------------

    # Number of top-scored videos flagged for highlighting.
    highlight_top_k: int = Field(default=10, ge=0)

    # Tag frequency is computed over this many top-scored videos only.
    tag_top_n: int = Field(default=10, ge=1)

    # History list page size.
    page_size: int = Field(default=5, ge=1)

    @model_validator(mode="after")
    def offset_keeps_base_positive(self):
        if self.min_age_hours + self.age_offset_hours <= 0:
            raise ValueError("min_age_hours + age_offset_hours must be positive")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "RankingConfig":
        """Create config from a dictionary, ignoring unknown keys."""
        flat = dict(config_dict.get("score", {}))
        flat.update({k: v for k, v in config_dict.items() if k != "score"})
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed and v is not None}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = RankingConfig()


def resolve_config(config: Optional["RankingConfig"]) -> "RankingConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
