"""CLI entry point for the site activity summary service."""

import argparse
import dataclasses
import signal
import sys

from dotenv import load_dotenv

from src.logging_config import configure_logging
from src.orchestrator import RunResult, build_application
from src.scheduler import next_anchor_occurrence
from src.settings import Frequency, SettingsError


def _print_run(result: RunResult) -> None:
    print("\n--- Summary Run ---")
    if result.skipped:
        print(f"  SKIPPED: {result.skipped_reason}")
        return
    for step in result.steps:
        status = "SKIPPED" if step.skipped else ("OK" if step.success else "FAILED")
        print(f"  {step.name}: {status} ({step.duration_seconds}s)")
        for key, value in step.details.items():
            print(f"    {key}: {value}")
        if step.error:
            print(f"    error: {step.error}")

    overall = "SUCCESS" if result.success else "FAILURE"
    print(f"\nResult: {overall}")


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Send periodic site activity summaries")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (overrides LOG_LEVEL env var)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--once",
        action="store_true",
        help="Build and send a summary now, ignoring the schedule",
    )
    mode.add_argument(
        "--status",
        action="store_true",
        help="Print the stored settings and the next 09:00 slot, then exit",
    )
    toggle = parser.add_mutually_exclusive_group()
    toggle.add_argument("--enable", action="store_true", help="Enable summaries")
    toggle.add_argument("--disable", action="store_true", help="Disable summaries")
    parser.add_argument("--recipient", metavar="EMAIL", help="Set the destination email address")
    parser.add_argument(
        "--frequency",
        choices=[f.value for f in Frequency],
        help="Set how often the summary is sent",
    )
    args = parser.parse_args()
    configure_logging(level_override=args.log_level)

    app = build_application()

    if args.enable or args.disable or args.recipient is not None or args.frequency:
        current = app.store.get()
        updated = dataclasses.replace(
            current,
            enabled=args.enable or (current.enabled and not args.disable),
            recipient=args.recipient if args.recipient is not None else current.recipient,
            frequency=Frequency(args.frequency) if args.frequency else current.frequency,
        )
        try:
            app.store.update(updated)
        except SettingsError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        print(f"Settings saved: {updated.to_dict()}")
        return 0

    if args.status:
        settings = app.store.get()
        print(f"enabled:   {settings.enabled}")
        print(f"recipient: {settings.recipient or '(not set)'}")
        print(f"frequency: {settings.frequency.value}")
        if settings.enabled:
            # The serving process keeps its registry in memory; this is only
            # where a scheduler started now would first fire
            slot = next_anchor_occurrence(app.clock.now())
            print(f"next slot: {slot.isoformat()} (if the scheduler starts now)")
        return 0

    if args.once:
        result = app.run_now()
        _print_run(result)
        return 0 if result.success else 1

    def _shutdown(signum, frame):
        app.ticker.stop()

    signal.signal(signal.SIGTERM, _shutdown)
    app.activate()
    next_fire = app.manager.next_fire_at()
    print(f"Next summary: {next_fire.isoformat() if next_fire else '(disabled)'}")
    app.ticker.run_forever()
    app.deactivate()
    return 0


if __name__ == "__main__":
    sys.exit(main())
