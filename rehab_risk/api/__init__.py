"""HTTP adapter for the risk engine."""

from rehab_risk.api.app import create_app

__all__ = ["create_app"]
