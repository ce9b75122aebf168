"""Scan every page from an eSCL scanner into a directory."""

import asyncio
import os
import sys
from pathlib import Path

import aiohttp
from loguru import logger

from escl import EsclClient, EsclError, build_scan_settings, discover
from escl.const import DEBUG
from escl.models import Capabilities, DeviceEndpoint

LOG_LEVEL = "DEBUG" if DEBUG else "INFO"
# Base URL including the eSCL prefix, e.g. http://192.168.1.20/eSCL
SCANNER_URL = os.getenv("SCANNER_URL")
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", "scans"))
RESOLUTION = os.getenv("RESOLUTION")
TIMEOUT = aiohttp.ClientTimeout(total=60)

logger.remove()
logger.add(sys.stdout, colorize=DEBUG, level=LOG_LEVEL)


def print_capabilities(capabilities: Capabilities) -> None:
    """Print what the scanner supports."""
    logger.info("=" * 80)
    logger.info(f"Make and model:   {capabilities.make_and_model}")
    logger.info(f"Serial number:    {capabilities.serial_number}")
    logger.info(f"eSCL version:     {capabilities.version}")
    logger.info(f"Admin URI:        {capabilities.admin_uri}")
    for name, caps in (
        ("Platen", capabilities.platen),
        ("ADF simplex", capabilities.adf_simplex),
        ("ADF duplex", capabilities.adf_duplex),
    ):
        if caps is None:
            continue
        logger.info(f"{name}:")
        logger.info(f"  Area:           {caps.max_width} x {caps.max_height}")
        logger.info(f"  Color modes:    {', '.join(mode.value for mode in caps.color_modes)}")
    logger.info("=" * 80)


async def select_scanner() -> str | None:
    """Return the configured scanner URL or the first discovered one."""
    if SCANNER_URL:
        return SCANNER_URL

    logger.info("🔍 Discovering scanners on network...")
    endpoints: list[DeviceEndpoint] = await discover(logger=logger)
    if not endpoints:
        logger.warning("⚠️  No scanners discovered on the network")
        return None

    logger.info(f"🎯 Found {len(endpoints)} scanner(s):")
    for i, endpoint in enumerate(endpoints, start=1):
        logger.info(f"  {i}. {endpoint}")
    return endpoints[0].base_url


async def main() -> None:
    """
    Scan a document and save every page.

    Uses SCANNER_URL if set, otherwise the first scanner found by discovery.
    """
    base_url = await select_scanner()
    if base_url is None:
        return

    async with aiohttp.ClientSession(timeout=TIMEOUT) as session:
        try:
            client = EsclClient(base_url, session=session, logger=logger)
            capabilities = await client.async_get_capabilities()
            print_capabilities(capabilities)

            status = await client.async_get_status()
            logger.info(f"Scanner state: {status.state.value}")

            options = {"resolution": int(RESOLUTION)} if RESOLUTION else {}
            settings = build_scan_settings(capabilities, **options)
            job = await client.async_scan(settings)
            logger.info(f"✅ Created {job}")

            OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
            page = 0
            async for document in job.documents():
                page += 1
                path = OUTPUT_DIR / f"page-{page:03d}.jpg"
                path.write_bytes(document)
                logger.info(f"📄 Saved {path} ({len(document)} bytes)")

            status = await client.async_get_status()
            job_info = status.job(job.job_url)
            if job_info is not None:
                logger.info(f"Job state: {job_info.job_state}")
            logger.info(f"Scanned {page} page(s)")
        except EsclError as e:
            logger.error(f"❌ Scan failed: {e}")


if __name__ == "__main__":
    asyncio.run(main())
