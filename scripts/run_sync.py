#!/usr/bin/env python3
"""
Cron job script to refresh the product cache and delivery profiles.
Add to crontab: 0 1 * * * cd /path/to/app && /path/to/venv/bin/python scripts/run_sync.py

This runs the sync as a standalone script, not through the web server.
"""

import asyncio
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kaghati.config import settings
from kaghati.db import SQLiteDatabase
from kaghati.processor import run_sync_safely, status_message

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


async def main():
    logger.info("Starting scheduled sync...")

    db = SQLiteDatabase(settings.database_path)
    await db.initialize()

    try:
        result = await run_sync_safely(db)
        logger.info(status_message(result.status) or "No sync status recorded")

        if not result.success:
            logger.error(f"Sync failed: {result.error}")
            sys.exit(1)

    finally:
        await db.close()


if __name__ == "__main__":
    asyncio.run(main())
