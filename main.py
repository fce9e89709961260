# Must be imported first — installs the colored formatter before any other module logs
import n7_runbook.logger  # noqa: F401

import asyncio
import logging

from n7_runbook.api_gateway.dependencies import register_session
from n7_runbook.api_gateway.service import APIGatewayService
from n7_runbook.audit_exporter.service import DirectoryExportSink
from n7_runbook.config import settings
from n7_runbook.progress.aggregator import percent_complete
from n7_runbook.session.service import open_session
from n7_runbook.utils import print_banner

logger = logging.getLogger("n7-runbook")


async def main():
    """
    Main entry point for N7-Runbook.
    Loads the step catalog and persisted progress, then serves the runbook API
    to the local presentation layer.
    """
    session = open_session(settings)
    print_banner(
        "N7-Runbook",
        step_count=len(session.catalog),
        progress=percent_complete(session.store.statuses()),
    )
    logger.info("Starting N7-Runbook...")

    register_session(session, DirectoryExportSink(settings.EXPORT_DIR))

    api_gateway = APIGatewayService()
    await api_gateway.start()

    try:
        while True:
            await asyncio.sleep(1)
    except asyncio.CancelledError:
        logger.info("N7-Runbook shutting down...")
    finally:
        await api_gateway.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("N7-Runbook stopped by user.")
