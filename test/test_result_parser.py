import json

from smarttrip.agents.parser import PARSE_FAILED, SUMMARY_CHARS, parse_itinerary


def test_extracts_object_wrapped_in_prose():
    result = parse_itinerary('noise {"days":[{"day":1}]} trailing')

    assert result.degraded is False
    assert result.payload == {"days": [{"day": 1}]}


def test_strips_markdown_fence():
    raw = '```json\n{"summary": "Beach week", "days": []}\n```'

    result = parse_itinerary(raw)

    assert result.degraded is False
    assert result.payload["summary"] == "Beach week"


def test_spans_first_to_last_brace():
    payload = {"summary": "x", "days": [{"day": 1, "activities": [{"time": "9:00 AM"}]}]}
    result = parse_itinerary("Sure! " + json.dumps(payload) + " Let me know {if} you need more")

    # the trailing "{if}" is inside the span, so the span is not valid JSON
    assert result.degraded is True


def test_text_without_braces_is_degraded():
    result = parse_itinerary("no braces here")

    assert result.degraded is True
    assert result.payload == {
        "summary": "no braces here",
        "raw_itinerary": "no braces here",
        "error": PARSE_FAILED,
    }


def test_malformed_json_keeps_full_text():
    raw = "Day 1: {arrive, check in} " + "x" * 500

    result = parse_itinerary(raw)

    assert result.degraded is True
    assert result.payload["raw_itinerary"] == raw
    assert result.payload["summary"] == raw[:SUMMARY_CHARS]
    assert len(result.payload["summary"]) == SUMMARY_CHARS


def test_non_object_json_is_degraded():
    result = parse_itinerary("[1, 2, 3]")

    assert result.degraded is True
    assert result.payload["error"] == PARSE_FAILED
