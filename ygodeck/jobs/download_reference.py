"""
Download reference data.

Fetches the forbidden/limited lists, GENESYS tables and pre-release index
from the configured reference URL into the data directory. A running
service picks the new files up on its next refresh.
"""

import asyncio
import logging

from ygodeck.config import settings
from ygodeck.services.reference_data import download_reference_files

logger = logging.getLogger(__name__)


async def run_download() -> list[str]:
    """Download all reference files. Returns the names of the files replaced."""
    if not settings.reference_data_url:
        logger.warning("YGODECK_REFERENCE_DATA_URL is not set; nothing to download")
        return []

    logger.info("Downloading reference data from %s...", settings.reference_data_url)
    try:
        updated = await download_reference_files(settings.reference_data_url, settings.data_dir)
    except Exception as e:
        logger.error("Failed to download reference data: %s", e)
        raise

    logger.info("Updated %d reference files in %s", len(updated), settings.data_dir)
    return updated


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download())


if __name__ == "__main__":
    main()
