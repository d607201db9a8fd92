"""
Free-text match description -> partial match record, using Gemini.

The extractor returns whatever the model produced as a plain dict. Callers
must run it through `models.match_model.normalize_draft` before it is shown
in the form or persisted: the output is untrusted input.
"""

from __future__ import annotations
import json
import logging
from datetime import date
from typing import Any, Dict, Optional

import google.generativeai as genai

from common.constants import TEAM_NAME
from common.errors import ExtractionError, ValidationError

logger = logging.getLogger(__name__)

RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "opponent": {"type": "string"},
        "ourScore": {"type": "integer"},
        "opponentScore": {"type": "integer"},
        "stadium": {"type": "string"},
        "date": {"type": "string"},
        "playerCount": {"type": "integer"},
        "scorers": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"name": {"type": "string"}, "goals": {"type": "integer"}},
                "required": ["name", "goals"],
            },
        },
    },
    "required": ["opponent", "ourScore", "opponentScore", "stadium", "date", "playerCount", "scorers"],
}


def _system_instruction(today: date) -> str:
    return (
        "You are the record keeper of a football club. Extract from the text:\n"
        "1. opponent: the opposing team name\n"
        f"2. ourScore: goals scored by our team ({TEAM_NAME})\n"
        "3. opponentScore: goals scored by the opponent\n"
        "4. stadium: the ground name\n"
        "5. date: match date as YYYY-MM-DD\n"
        "6. playerCount: number of our players who attended\n"
        "7. scorers: list of our scorers (name, goals)\n"
        "Return exactly one JSON object. Unknown values: date = "
        f"{today.isoformat()}, numbers = 0, strings = \"\"."
    )


def _response_text(resp: Any) -> str:
    text = getattr(resp, "text", None)
    if isinstance(text, str) and text.strip():
        return text
    # Fallback: iterate candidates/parts
    parts = []
    for cand in getattr(resp, "candidates", None) or []:
        for p in getattr(getattr(cand, "content", None), "parts", None) or []:
            tx = getattr(p, "text", None)
            if isinstance(tx, str) and tx:
                parts.append(tx)
    return "\n".join(parts)


def parse_extraction(text: str) -> Dict[str, Any]:
    """Parse the model reply; tolerates a ```json fenced block around the object."""
    s = (text or "").strip()
    if s.startswith("```"):
        s = s.strip("`")
        if s.lower().startswith("json"):
            s = s[4:]
    if not s:
        raise ExtractionError("The model returned an empty reply.")
    try:
        data = json.loads(s)
    except json.JSONDecodeError as exc:
        raise ExtractionError("The model reply was not valid JSON.") from exc
    if not isinstance(data, dict):
        raise ExtractionError("The model reply was not a JSON object.")
    return data


class MatchExtractor:
    """Thin wrapper around a Gemini model."""

    def __init__(self, api_key: str, model_name: str, model: Optional[Any] = None):
        if model is None:
            if not api_key or not str(api_key).strip():
                raise ValueError("api_key is required")
            genai.configure(api_key=str(api_key).strip())
            model = genai.GenerativeModel(model_name)
        self.model = model
        self.model_name = model_name

    def extract(self, text: str, today: Optional[date] = None) -> Dict[str, Any]:
        if not text or not text.strip():
            raise ValidationError(["Please describe the match first."])
        today = today or date.today()
        prompt = (
            f"{_system_instruction(today)}\n\n"
            f"The following describes a football match result:\n\"{text.strip()}\""
        )
        try:
            resp = self.model.generate_content(
                prompt,
                generation_config={
                    "response_mime_type": "application/json",
                    "response_schema": RESPONSE_SCHEMA,
                },
            )
        except Exception as exc:
            logger.warning("gemini request failed", exc_info=True)
            raise ExtractionError("The AI service could not analyse the text.") from exc
        return parse_extraction(_response_text(resp))
