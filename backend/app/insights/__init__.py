from __future__ import annotations

from .advice import AdviceResult, AdviceService, build_advice_prompt
from .aggregations import (
    compute_activity_analysis,
    compute_daily_patterns,
    compute_distribution,
    compute_trigger_analysis,
    compute_wellness_insights,
)

__all__ = [
    "AdviceResult",
    "AdviceService",
    "build_advice_prompt",
    "compute_activity_analysis",
    "compute_daily_patterns",
    "compute_distribution",
    "compute_trigger_analysis",
    "compute_wellness_insights",
]
