"""
Behavioural insight assembly.

The language model only writes the narrative parts of an insight report.
Everything that can be computed from the trades (mood statistics, setup
discipline, best/worst mood) is computed here and used to back-fill
whatever the model leaves out.
"""

import json
import logging
import re
from typing import Any

from tradejournal.domain.journal.entities import IntradayTrade
from tradejournal.domain.journal.errors import InsightGenerationError
from tradejournal.domain.journal.statistics import (
    mood_performance,
    setup_stats,
    summarize_trades,
)

logger = logging.getLogger(__name__)

PROMPT_TRADE_LIMIT = 50
DEFAULT_TOP_TIPS = [
    "Start logging your trades consistently",
    "Track your emotional state",
    "Follow your trading setup",
]

_FENCE = re.compile(r"```(?:json)?\s*")


def _mood_stats(trades: list[IntradayTrade]) -> list[dict[str, Any]]:
    return [
        {
            "mood": p.key,
            "trades": p.trades,
            "winRate": p.win_rate,
            "avgPL": p.avg_pl,
            "totalPL": p.total_pl,
        }
        for p in mood_performance(trades)
    ]


def prompt_variables(trades: list[IntradayTrade]) -> dict[str, str]:
    """Values substituted into the insight prompt template.

    ``trades`` is expected newest first; only the most recent
    PROMPT_TRADE_LIMIT are listed individually.
    """
    summary = summarize_trades(trades)
    mood_lines = "\n".join(
        f"- {m['mood']}: {m['trades']} trades, {m['winRate']:.1f}% win rate, "
        f"Avg P&L: ₹{m['avgPL']:.2f}"
        for m in _mood_stats(trades)
    )
    recent = [
        {
            "date": t.trade_date.isoformat(),
            "script": t.script,
            "type": t.trade_type.value,
            "pl": f"{t.net_profit_loss:.2f}",
            "mood": t.mood.value,
            "followedSetup": t.follow_setup,
            "remarks": t.remarks or "",
        }
        for t in trades[:PROMPT_TRADE_LIMIT]
    ]
    return {
        "total_trades": str(summary.total_trades),
        "winning_trades": str(summary.winning_trades),
        "win_rate": f"{summary.win_rate:.1f}",
        "losing_trades": str(summary.losing_trades),
        "total_pl": f"{summary.total_pl:.2f}",
        "setup_adherence": f"{summary.setup_adherence_rate:.1f}",
        "mood_statistics": mood_lines,
        "trade_limit": str(PROMPT_TRADE_LIMIT),
        "recent_trades": json.dumps(recent, indent=2, ensure_ascii=False),
    }


def parse_model_output(content: str) -> dict[str, Any]:
    """Strip markdown fences and decode the model's JSON answer.

    Raises:
        InsightGenerationError: If the content is not a JSON object.
    """
    cleaned = _FENCE.sub("", content).replace("```", "").strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.error("Failed to parse AI response (%d chars)", len(content))
        raise InsightGenerationError("Invalid AI response format") from None
    if not isinstance(parsed, dict):
        raise InsightGenerationError("Invalid AI response format")
    return parsed


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def assemble_insights(
    model_output: dict[str, Any], trades: list[IntradayTrade]
) -> dict[str, Any]:
    """Merge the model's narrative with locally computed statistics."""
    if not trades:
        return empty_insights()

    mood_stats = _mood_stats(trades)
    summary = summarize_trades(trades)
    followed = setup_stats(trades, followed=True)
    ignored = setup_stats(trades, followed=False)

    best_mood = max(mood_stats, key=lambda m: m["winRate"])["mood"] if mood_stats else "CALM"
    worst_mood = min(mood_stats, key=lambda m: m["winRate"])["mood"] if mood_stats else "PANICKED"

    psychology = _section(model_output, "tradingPsychology")
    remarks = _section(model_output, "remarksAnalysis")
    moods = _section(model_output, "moodPerformance")
    warnings = _section(model_output, "behavioralWarnings")
    discipline = _section(model_output, "setupDiscipline")
    recommendations = _section(model_output, "recommendations")

    return {
        "tradingPsychology": {
            "summary": psychology.get("summary") or "No trading psychology insights available",
            "details": psychology.get("details") or [],
            "moodPatterns": psychology.get("moodPatterns") or [],
        },
        "remarksAnalysis": {
            "summary": remarks.get("summary") or "No remarks to analyze",
            "themes": remarks.get("themes") or [],
            "strategies": remarks.get("strategies") or [],
            "marketConditions": remarks.get("marketConditions") or [],
            "selfReflections": remarks.get("selfReflections") or [],
        },
        "moodPerformance": {
            "summary": moods.get("summary") or "Insufficient data for mood analysis",
            "moodStats": mood_stats,
            "bestMood": moods.get("bestMood") or best_mood,
            "worstMood": moods.get("worstMood") or worst_mood,
        },
        "behavioralWarnings": {
            "summary": warnings.get("summary") or "No critical warnings",
            "warningCount": warnings.get("warningCount") or 0,
            "warnings": warnings.get("warnings") or [],
        },
        "setupDiscipline": {
            "summary": discipline.get("summary") or "Setup discipline data insufficient",
            "adherenceRate": summary.setup_adherence_rate,
            "followedSetupStats": {"winRate": followed.win_rate, "avgPL": followed.avg_pl},
            "ignoredSetupStats": {"winRate": ignored.win_rate, "avgPL": ignored.avg_pl},
            "moodCorrelation": discipline.get("moodCorrelation") or [],
        },
        "recommendations": {
            "summary": recommendations.get("summary")
            or "Add more trades to get personalized recommendations",
            "topTips": recommendations.get("topTips") or list(DEFAULT_TOP_TIPS),
            "detailedAdvice": recommendations.get("detailedAdvice") or [],
        },
    }


def empty_insights() -> dict[str, Any]:
    """Insight report for a user without trades."""
    return {
        "tradingPsychology": {
            "summary": "No trades available for analysis",
            "details": [],
            "moodPatterns": [],
        },
        "remarksAnalysis": {
            "summary": "No remarks to analyze",
            "themes": [],
            "strategies": [],
            "marketConditions": [],
            "selfReflections": [],
        },
        "moodPerformance": {
            "summary": "Add trades to see mood performance analysis",
            "moodStats": [],
            "bestMood": "",
            "worstMood": "",
        },
        "behavioralWarnings": {"summary": "No warnings", "warningCount": 0, "warnings": []},
        "setupDiscipline": {
            "summary": "No data available",
            "adherenceRate": 0.0,
            "followedSetupStats": {"winRate": 0.0, "avgPL": 0.0},
            "ignoredSetupStats": {"winRate": 0.0, "avgPL": 0.0},
            "moodCorrelation": [],
        },
        "recommendations": {
            "summary": "Start logging trades to receive personalized recommendations",
            "topTips": ["Log your first trade to get started"],
            "detailedAdvice": [],
        },
    }
