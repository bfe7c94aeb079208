"""Tracing configuration, loadable from YAML."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_HISTORY_CAPACITY = 50


class ContinuationPolicy(str, Enum):
    """Where tracing continues after a wire is committed."""

    FORWARD = "forward"  # follow on from the destination terminal
    RESUME_PENDING = "resume_pending"  # circle back to the discovery stack first


class ShapePolicy(str, Enum):
    """What the codec does with rows that have the wrong field count."""

    FIX = "fix"  # right-pad short rows, truncate long rows
    SKIP = "skip"


class TraceConfig(BaseModel):
    """Settings for a tracing session and its file codec."""

    history_capacity: int = Field(
        default=DEFAULT_HISTORY_CAPACITY, ge=1, description="Undo snapshots kept"
    )
    continuation: ContinuationPolicy = Field(default=ContinuationPolicy.FORWARD)
    shape_policy: ShapePolicy = Field(default=ShapePolicy.FIX)
    affirmative: list[str] = Field(default_factory=lambda: ["y", "yes"])
    negative: list[str] = Field(default_factory=lambda: ["n", "no"])
    delimiter: str = Field(default=",", min_length=1, max_length=1)

    @field_validator("affirmative", "negative")
    @classmethod
    def _casefold_words(cls, words: list[str]) -> list[str]:
        cleaned = [w.strip().casefold() for w in words if w.strip()]
        if not cleaned:
            raise ValueError("at least one answer word is required")
        return cleaned

    @classmethod
    def from_yaml(cls, path: str | Path) -> TraceConfig:
        """Load a config from a YAML file; an empty file gives the defaults."""
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    def to_yaml(self, path: str | Path) -> None:
        path = Path(path)
        data = self.model_dump(mode="json")
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def load_config(path: str | Path | None = None) -> TraceConfig:
    """Load a config from *path*, or return the defaults when no path is given."""
    if path is None:
        return TraceConfig()
    return TraceConfig.from_yaml(path)
