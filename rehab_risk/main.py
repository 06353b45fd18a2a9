"""Main entry point for RehabRisk."""

import logging
import sys

from rehab_risk.config import get_settings


def setup_logging():
    """Configure logging based on settings."""
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main():
    """Main entry point - serves the API."""
    setup_logging()

    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "rehab_risk.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )


async def run_assessment(patient_id: str, **kwargs):
    """Programmatic API for assessing one patient against the configured database.

    Example:
        import asyncio
        from rehab_risk.main import run_assessment

        assessment, alerts = asyncio.run(run_assessment("patient-123"))
    """
    from rehab_risk.core.database import _get_session_factory, init_db
    from rehab_risk.core.repository import SqlRiskDataStore
    from rehab_risk.risk.aggregator import run_assessment as assess

    setup_logging()
    await init_db()

    async with _get_session_factory()() as session:
        result = await assess(
            SqlRiskDataStore(session),
            patient_id,
            weights=kwargs.get("weights"),
            provider_id=kwargs.get("provider_id"),
        )
        await session.commit()
    return result


if __name__ == "__main__":
    main()
