"""Patient risk stratification: domain scorers, aggregation, alerts."""

from rehab_risk.risk.aggregator import (
    RiskAggregator,
    compute_trend,
    generate_recommendations,
    risk_level_for_score,
    run_assessment,
)
from rehab_risk.risk.alerts import (
    AlertService,
    acknowledge_alert,
    dismiss_alert,
    evaluate_alerts,
    mark_assessment_reviewed,
    resolve_alert,
    transition_alert,
)
from rehab_risk.risk.dashboard import build_provider_dashboard, get_risk_trend
from rehab_risk.risk.scorers import DOMAIN_SCORERS
from rehab_risk.risk.store import RiskDataStore

__all__ = [
    "AlertService",
    "DOMAIN_SCORERS",
    "RiskAggregator",
    "RiskDataStore",
    "acknowledge_alert",
    "build_provider_dashboard",
    "compute_trend",
    "dismiss_alert",
    "evaluate_alerts",
    "generate_recommendations",
    "get_risk_trend",
    "mark_assessment_reviewed",
    "resolve_alert",
    "risk_level_for_score",
    "run_assessment",
    "transition_alert",
]
