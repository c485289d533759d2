"""AI Agents package."""

from src.agents.report_agent import (
    NO_ANALYSIS,
    SERVICE_UNAVAILABLE,
    WeeklyReportAgent,
    build_report_prompt,
)

__all__ = [
    "NO_ANALYSIS",
    "SERVICE_UNAVAILABLE",
    "WeeklyReportAgent",
    "build_report_prompt",
]
