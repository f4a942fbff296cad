"""
Tests for structured log formatting.

Run with: pytest test_logging.py -v
"""

import json
import logging

from logging_config import (
    DevelopmentFormatter,
    JSONFormatter,
    collect_context,
    get_logger,
    room_code_var,
)


def make_record(level=logging.INFO, **extra):
    record = logging.LogRecord("papayoo.test", level, __file__, 10, "hello %s", ("table",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# =============================================================================
# Context
# =============================================================================

class TestContext:

    def test_context_var_used_when_no_extra(self):
        token = room_code_var.set("ABCD")
        try:
            assert collect_context(make_record()) == {"room_code": "ABCD"}
        finally:
            room_code_var.reset(token)

    def test_extra_wins_over_context_var(self):
        token = room_code_var.set("ABCD")
        try:
            context = collect_context(make_record(room_code="WXYZ", action="roll_die"))
        finally:
            room_code_var.reset(token)
        assert context == {"room_code": "WXYZ", "action": "roll_die"}

    def test_with_context_merges(self):
        logger = get_logger("papayoo.test").with_context(room_code="ABCD")
        child = logger.with_context(action="play_card")
        assert child.extra == {"room_code": "ABCD", "action": "play_card"}
        assert logger.extra == {"room_code": "ABCD"}


# =============================================================================
# Formatters
# =============================================================================

class TestFormatters:

    def test_json_fields(self):
        payload = json.loads(JSONFormatter().format(make_record(player_id="p1")))
        assert payload["message"] == "hello table"
        assert payload["level"] == "INFO"
        assert payload["player_id"] == "p1"
        assert "source" not in payload

    def test_json_errors_carry_source(self):
        payload = json.loads(JSONFormatter().format(make_record(level=logging.ERROR)))
        assert ":10 in " in payload["source"]

    def test_development_line(self):
        line = DevelopmentFormatter().format(
            make_record(request_id="0123456789abcdef", room_code="ABCD")
        )
        assert "[req=01234567 room=ABCD]" in line
        assert line.endswith("papayoo.test [req=01234567 room=ABCD] - hello table")
