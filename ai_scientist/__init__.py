"""Autonomous AI Scientist: data science readiness reports and conversational data exploration."""

__version__ = "1.0.0"

from ai_scientist.agents.chat_agent import process_query  # noqa: E402
from ai_scientist.agents.data_agent import parse_csv  # noqa: E402
from ai_scientist.pipeline import analyze, analyze_csv  # noqa: E402

__all__ = ["analyze", "analyze_csv", "parse_csv", "process_query", "__version__"]
