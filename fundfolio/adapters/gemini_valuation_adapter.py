"""GeminiValuationAdapter - ValuationPort backed by Gemini with search grounding.

Asks the Gemini ``generateContent`` endpoint, with the Google Search tool
enabled, for the latest NAV of the exact ISIN share class and a monthly
history, and parses the JSON answer.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from typing import TYPE_CHECKING, Any

import httpx

from fundfolio.core.domain.valuation import ValuationQuote
from fundfolio.core.ports.valuation_port import ValuationPermissionError

if TYPE_CHECKING:
    from fundfolio.core.domain.position import Position

logger = logging.getLogger(__name__)

API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_TIMEOUT = 60.0
DEFAULT_HISTORY_MONTHS = 24

# HTTP statuses meaning the key cannot use the model or the search tool
PERMISSION_STATUSES = frozenset({401, 403, 404})

SYSTEM_INSTRUCTION = (
    "You are a financial data analyst with Bloomberg and Morningstar expertise. "
    "Your priority is the accuracy of the latest available net asset value."
)

# Structured answer: latest NAV plus monthly history
RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "current": {
            "type": "OBJECT",
            "properties": {
                "nav": {"type": "NUMBER"},
                "date": {"type": "STRING"},
            },
            "required": ["nav", "date"],
        },
        "history": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "date": {"type": "STRING"},
                    "nav": {"type": "NUMBER"},
                },
            },
        },
    },
}

_CODE_FENCE = re.compile(r"```(?:json)?\n?")


def build_prompt(position: "Position", today: date, history_months: int) -> str:
    """Build the lookup prompt for one fund."""
    return (
        "HIGH-PRECISION FINANCIAL INSTRUCTION:\n"
        f"I need the MOST RECENT net asset value (NAV) as of today ({today.isoformat()}) "
        "for the fund:\n"
        f"Name: {position.name}\n"
        f"ISIN: {position.isin}\n\n"
        "MANDATORY REQUIREMENTS:\n"
        "1. RECENCY: use the latest official closing valuation. Do not accept data older "
        "than 72h if the market has been open.\n"
        f"2. ISIN CONSISTENCY: the value must belong exclusively to the {position.isin} "
        "share class.\n"
        f"3. HISTORY: provide the last {history_months} months (one point per month).\n\n"
        "ANSWER ONLY WITH JSON:\n"
        '{"current": {"nav": number, "date": "YYYY-MM-DD"}, '
        '"history": [{"date": "YYYY-MM-DD", "nav": number}]}'
    )


def parse_model_json(text: str | None) -> Any:
    """Parse a JSON answer, tolerating markdown code fences.

    Returns:
        Parsed JSON, or None if the text is empty or not valid JSON
    """
    if not text:
        return None
    cleaned = _CODE_FENCE.sub("", text).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        logger.error("Could not parse JSON from model answer")
        return None


class GeminiValuationAdapter:
    """Valuation lookups through the Gemini REST API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        history_months: int = DEFAULT_HISTORY_MONTHS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize GeminiValuationAdapter.

        Args:
            api_key: Gemini API key
            model: Model name
            timeout: Request timeout in seconds
            history_months: Number of monthly history points requested
            client: Optional pre-configured client (used as-is, not closed)

        Raises:
            ValueError: If api_key is empty
        """
        if not api_key:
            raise ValueError("A Gemini API key is required for valuation lookups")

        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._history_months = history_months
        self._client = client

    @property
    def endpoint(self) -> str:
        return f"{API_BASE_URL}/models/{self._model}:generateContent"

    async def fetch_valuation(self, position: "Position") -> ValuationQuote | None:
        """Fetch the latest NAV and history for a position.

        Returns:
            ValuationQuote, or None when no reliable data could be obtained

        Raises:
            ValuationPermissionError: If the key is rejected (HTTP 401/403/404)
        """
        body = self._request_body(position, date.today())

        try:
            if self._client is not None:
                response = await self._post(self._client, body)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._post(client, body)
        except httpx.HTTPError as e:
            logger.error("Valuation request for %s failed: %s", position.isin, e)
            return None

        if response.status_code in PERMISSION_STATUSES:
            raise ValuationPermissionError(position.isin, response.status_code)
        if response.status_code >= 400:
            logger.error(
                "Valuation request for %s returned HTTP %s", position.isin, response.status_code
            )
            return None

        payload = parse_model_json(self._answer_text(response))
        try:
            return ValuationQuote.from_payload(payload)
        except ValueError as e:
            logger.error("No reliable data for %s: %s", position.isin, e)
            return None

    async def _post(self, client: httpx.AsyncClient, body: dict[str, Any]) -> httpx.Response:
        return await client.post(
            self.endpoint,
            json=body,
            headers={"x-goog-api-key": self._api_key},
            timeout=self._timeout,
        )

    def _request_body(self, position: "Position", today: date) -> dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": build_prompt(position, today, self._history_months)}],
                }
            ],
            "tools": [{"google_search": {}}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    @staticmethod
    def _answer_text(response: httpx.Response) -> str | None:
        """Concatenate the text parts of the first candidate."""
        try:
            data = response.json()
        except ValueError:
            return None

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not candidates or not isinstance(candidates[0], dict):
            return None

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        return text or None
