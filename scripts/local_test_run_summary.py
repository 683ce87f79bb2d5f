#!/usr/bin/env python3
"""Local smoke test for the activity summary pipeline.

Checks that the WordPress endpoint and mail transport are configured,
then builds and sends one summary immediately, ignoring the schedule.

Run from project root:
    python scripts/local_test_run_summary.py
"""

import dataclasses
import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

sys.path.insert(0, str(PROJECT_ROOT))
from dotenv import load_dotenv

load_dotenv(PROJECT_ROOT / ".env")

REQUIRED_ENV_VARS = [
    "WP_BASE_URL",
    "SUMMARY_RECIPIENT",
]


def check_prerequisites() -> list[str]:
    errors = []

    for var in REQUIRED_ENV_VARS:
        if not os.environ.get(var):
            errors.append(f"Missing env var: {var}")

    transport = os.environ.get("MAIL_TRANSPORT", "gmail").lower()
    if transport == "smtp":
        if not os.environ.get("SMTP_HOST"):
            errors.append("Missing env var: SMTP_HOST (MAIL_TRANSPORT=smtp)")
    else:
        for path in (CONFIG_DIR / "credentials.json", CONFIG_DIR / "gmail_send_token.json"):
            if not path.exists():
                errors.append(f"Missing file: {path.relative_to(PROJECT_ROOT)}")

    return errors


def main() -> int:
    print("Checking prerequisites ...\n")
    errors = check_prerequisites()

    if errors:
        for err in errors:
            print(f"  ✗ {err}")
        print(
            "\nSetup instructions:"
            "\n  1. Set WP_BASE_URL (and WP_USERNAME / WP_APP_PASSWORD) in .env"
            "\n  2. Set SUMMARY_RECIPIENT to the address that should receive the summary"
            "\n  3. For Gmail, place OAuth credentials in config/credentials.json and"
            "\n     run 'python run_agent.py --once' interactively to create the token"
        )
        return 1

    for var in REQUIRED_ENV_VARS:
        print(f"  ✓ {var}")

    print("\nAll prerequisites met. Sending one summary now ...\n")

    from src.orchestrator import SummaryJob
    from src.scheduler import local_now
    from src.settings import settings_from_env

    # The smoke run sends even if SUMMARY_ENABLED is unset
    settings = dataclasses.replace(settings_from_env(), enabled=True)
    result = SummaryJob().run(settings, local_now())

    print("\n--- Pipeline Summary ---")
    if result.skipped:
        print(f"  skipped: {result.skipped_reason}")
    for step in result.steps:
        status = "SKIPPED" if step.skipped else ("OK" if step.success else "FAILED")
        print(f"  {step.name}: {status} ({step.duration_seconds}s)")
        for key, value in step.details.items():
            print(f"    {key}: {value}")
        if step.error:
            print(f"    error: {step.error}")

    overall = "PASS" if result.success else "FAIL"
    print(f"\nResult: {overall}")
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
