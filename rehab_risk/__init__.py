"""RehabRisk: red-flag triage and patient risk stratification for rehab programs."""

__version__ = "0.1.0"
