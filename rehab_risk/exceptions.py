"""Exceptions raised by the risk engine."""


class RehabRiskError(Exception):
    """Base exception for RehabRisk errors."""

    pass


class InvalidAlertTransition(RehabRiskError):
    """Requested alert status change is not allowed from the current status."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move alert from '{current}' to '{target}'")


class AssessmentNotFound(RehabRiskError):
    """No risk assessment with the given id."""

    pass


class AlertNotFound(RehabRiskError):
    """No risk alert with the given id."""

    pass
