"""Tests for the keyword-matching assistant."""
from __future__ import annotations

import pytest

from cube_api.application.assistant import (
    DEBUG_REPLY,
    FALLBACK_REPLY,
    MOISTURE_PUMP_REPLY,
    SKETCH_REPLY,
    TEMPERATURE_FAN_REPLY,
    respond,
)


class TestAssistant:
    """Test rule precedence of the canned replies."""

    @pytest.mark.parametrize("text, expected", [
        ("Create a sketch for my garden", SKETCH_REPLY),
        ("My WORKFLOW is empty", SKETCH_REPLY),
        ("I have a problem", DEBUG_REPLY),
        ("There is an error somewhere", DEBUG_REPLY),
        ("water pump when moisture drops", MOISTURE_PUMP_REPLY),
        ("It is too hot, I need a fan", TEMPERATURE_FAN_REPLY),
        ("Temperature is rising", TEMPERATURE_FAN_REPLY),
        ("hello there", FALLBACK_REPLY),
    ])
    def test_rules(self, text, expected):
        """Test each rule fires on its keywords, case-insensitively."""
        assert respond(text) == expected

    def test_sketch_rule_wins(self):
        """Test earlier rules take precedence when several match."""
        assert respond("create a moisture pump workflow") == SKETCH_REPLY
        assert respond("debug my moisture pump") == DEBUG_REPLY

    def test_moisture_alone_falls_through(self):
        """Test the moisture rule needs both keywords."""
        assert respond("moisture is low") == FALLBACK_REPLY
