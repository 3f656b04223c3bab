"""
Extraction of the structured itinerary from synthesis output.

The model is asked for JSON only but is not bound to comply, so the parser
has two outcomes: the parsed object, or a degraded object that still carries
the full text for display.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict

logger = logging.getLogger("smarttrip.parser")

SUMMARY_CHARS = 200
PARSE_FAILED = "parse failed"


@dataclass
class ItineraryResult:
    payload: Dict[str, Any]
    degraded: bool = False


def degraded_itinerary(raw_text: str) -> Dict[str, Any]:
    return {
        "summary": raw_text[:SUMMARY_CHARS],
        "raw_itinerary": raw_text,
        "error": PARSE_FAILED,
    }


def parse_itinerary(raw_text: str) -> ItineraryResult:
    """
    Parse the outermost JSON object in `raw_text`.

    Takes everything from the first `{` to the last `}`. No schema validation
    is done; consumers branch on the presence of `days`.
    """
    content = raw_text.strip()
    if content.startswith('```'):
        content = re.sub(r'^```(?:json)?\s*', '', content)
        content = re.sub(r'\s*```$', '', content)

    json_start = content.find('{')
    json_end = content.rfind('}')

    if json_start != -1 and json_end > json_start:
        try:
            data = json.loads(content[json_start:json_end + 1])
            if isinstance(data, dict):
                return ItineraryResult(payload=data)
        except json.JSONDecodeError as e:
            logger.warning("Error parsing itinerary JSON: %s", e)
    else:
        logger.warning("No JSON found in itinerary response")

    return ItineraryResult(payload=degraded_itinerary(raw_text), degraded=True)
