"""False-report risk engine.

Four additive sub-analyzers (content, behavior, timing, location) feed a
suspicion score, a risk tier, a recommendation and the auto-flag rules.
"""

from reportguard.risk.engine import (
    AUTO_FLAG_RULES,
    analyze_potential_false_report,
    auto_flag_rules_matched,
    generate_analysis_summary,
    should_auto_flag,
)
from reportguard.risk.models import RiskAnalysis, RiskLevel

__all__ = [
    "AUTO_FLAG_RULES",
    "RiskAnalysis",
    "RiskLevel",
    "analyze_potential_false_report",
    "auto_flag_rules_matched",
    "generate_analysis_summary",
    "should_auto_flag",
]
