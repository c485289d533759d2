"""
Weekly Report Agent

Asks Gemini for a short, friendly summary of one week.

CRITICAL BOUNDARIES:
- CAN: Read a WeekData and return text
- CANNOT: Change AppState or anything persisted
- MUST: Return a fixed fallback text instead of raising

The report is an enrichment. A missing API key, an empty answer or a failed
call all produce a plain-text fallback so the history view keeps working.
"""

import json
from typing import Any, Optional

import google.generativeai as genai

from src.config import get_settings
from src.logs import LedgerLogger
from src.models.ledger import WeekData

SERVICE_UNAVAILABLE = "Analysis service unavailable."
NO_ANALYSIS = "Unable to generate analysis at this time."


def build_report_prompt(week: WeekData) -> str:
    """Prompt with the week's income and a compact view of its transactions."""
    transactions = [
        {
            "title": tx.title,
            "amount": float(tx.amount),
            "type": tx.type.value,
            "status": "completed" if tx.is_confirmed else "pending",
        }
        for tx in week.transactions
    ]

    return f"""Analyze this weekly financial data for a personal user.
Income: {week.income}
Transactions: {json.dumps(transactions, ensure_ascii=False)}

Provide a concise, helpful summary in 3 bullet points.
1. Spending efficiency (Income vs Expenses).
2. Largest category or expense.
3. A quick tip for next week.
Keep it friendly and short."""


class WeeklyReportAgent:
    """
    AI agent for the weekly report in the history view.

    RESPONSIBILITIES:
    - Turn one week into a prompt
    - Return the model's text, or a fallback

    BOUNDARIES:
    - NEVER mutates ledger state
    - NEVER raises to the caller
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[Any] = None,
        logger: Optional[LedgerLogger] = None,
    ):
        self._settings = get_settings().gemini
        self._api_key = api_key or self._settings.api_key
        self._logger = logger or LedgerLogger()
        self._model = model
        if self._model is None and self._api_key:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    async def generate_report(self, week: WeekData) -> str:
        """
        Summarize `week` in a few bullet points.

        Returns NO_ANALYSIS when no model is configured or the answer is
        empty, SERVICE_UNAVAILABLE when the call fails.
        """
        if self._model is None:
            return NO_ANALYSIS

        try:
            response = await self._model.generate_content_async(build_report_prompt(week))
            text = (response.text or "").strip()
        except Exception as e:
            self._logger.log_report_failed(week_id=week.id, error_message=str(e))
            return SERVICE_UNAVAILABLE

        return text or NO_ANALYSIS
