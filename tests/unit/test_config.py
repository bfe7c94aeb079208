"""Tests for tracing configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from wire_trace.config import ContinuationPolicy, ShapePolicy, TraceConfig, load_config
from wire_trace.tracing import TraceEngine


class TestTraceConfig:
    def test_defaults(self) -> None:
        config = TraceConfig()
        assert config.history_capacity == 50
        assert config.continuation is ContinuationPolicy.FORWARD
        assert config.shape_policy is ShapePolicy.FIX
        assert config.affirmative == ["y", "yes"]
        assert config.negative == ["n", "no"]
        assert config.delimiter == ","
        assert "row_type" not in TraceConfig.model_fields

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValidationError):
            TraceConfig(history_capacity=0)

    def test_invalid_delimiter(self) -> None:
        with pytest.raises(ValidationError):
            TraceConfig(delimiter=";;")

    def test_answer_words_normalized(self) -> None:
        config = TraceConfig(affirmative=[" OK ", "Sure", ""])
        assert config.affirmative == ["ok", "sure"]

    def test_answer_words_required(self) -> None:
        with pytest.raises(ValidationError):
            TraceConfig(negative=["  "])

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "trace.yaml"
        path.write_text(
            "history_capacity: 10\n"
            "continuation: resume_pending\n"
            "shape_policy: skip\n"
            "affirmative: [ja]\n"
        )
        config = TraceConfig.from_yaml(path)
        assert config.history_capacity == 10
        assert config.continuation is ContinuationPolicy.RESUME_PENDING
        assert config.shape_policy is ShapePolicy.SKIP
        assert config.affirmative == ["ja"]

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert TraceConfig.from_yaml(path) == TraceConfig()

    def test_yaml_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "out.yaml"
        config = TraceConfig(history_capacity=7, continuation=ContinuationPolicy.RESUME_PENDING)
        config.to_yaml(path)
        assert TraceConfig.from_yaml(path) == config

    def test_load_config_default(self) -> None:
        assert load_config() == TraceConfig()

    def test_engine_uses_capacity(self) -> None:
        engine = TraceEngine(config=TraceConfig(history_capacity=2))
        assert engine.session.history.capacity == 2
        for answer in ["1", "AA", "A01", "2"]:
            engine.submit(answer)
        assert len(engine.session.history) == 2
