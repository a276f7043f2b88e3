#!/usr/bin/env python3
"""Smoke-check the portal login: authenticate, open the map and save a screenshot."""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to Python path
sys.path.append(str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from sigri_worker.browser.playwright_session import open_browser_session
from sigri_worker.config import get_settings
from sigri_worker.core.logging import configure_logging
from sigri_worker.workflow.pipeline import StepContext, build_pipeline, run_pipeline

LOGIN_STEPS = {"authenticate", "open_working_surface"}


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--screenshot", default="/tmp/onr_login_check.png")
    args = parser.parse_args()

    load_dotenv()
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, json=False)
    logger = logging.getLogger("check_login")

    pipeline = [step for step in build_pipeline() if step.name in LOGIN_STEPS]
    try:
        with open_browser_session(settings) as session:
            ctx = StepContext(session=session, job_store=None, settings=settings, state={"job_id": None})
            run_pipeline(pipeline, ctx)
            session.screenshot(args.screenshot)
    except Exception as e:
        logger.error("Login check failed: %s", e)
        return 1

    print(f"OK: screenshot saved to {args.screenshot}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
