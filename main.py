"""
Rhyme Racer - Headless round runner

Entry point: plays one round on a real Qt event loop and logs the
final score.
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional

from PySide6.QtCore import QCoreApplication

from config import init_config, setup_logging, APP_NAME, APP_VERSION, GAME_SETTINGS


logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=APP_NAME, description="Play one headless Rhyme Racer round.")
    parser.add_argument("--seed", type=int, default=0, help="spawn RNG seed")
    parser.add_argument("--duration", type=float, default=GAME_SETTINGS.timing.round_duration_ms / 1000,
                        help="round length in seconds")
    parser.add_argument("--accuracy", type=float, default=0.8,
                        help="autopilot answer accuracy in [0, 1]")
    parser.add_argument("--no-autopilot", action="store_true", help="run without a scripted player")
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for Rhyme Racer."""
    args = parse_args(sys.argv[1:] if argv is None else argv)

    # Initialize configuration and directories
    init_config()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    # Create application
    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    settings = replace(
        GAME_SETTINGS,
        timing=replace(GAME_SETTINGS.timing, round_duration_ms=int(args.duration * 1000)),
    )

    from app import RhymeRacerApp
    from services.autopilot import Autopilot

    racer = RhymeRacerApp(settings=settings)
    autopilot = None
    if not args.no_autopilot:
        autopilot = Autopilot(racer.event_bus, accuracy=args.accuracy, seed=args.seed,
                              track=settings.track)

    def on_results(record) -> None:
        logger.info("Final score: %s (overall %d%%)", record.model_dump(), record.overall_score)
        if autopilot is not None:
            logger.info("Autopilot taps: %d, lane changes: %d", autopilot.taps, autopilot.lane_changes)
        app.quit()

    racer.event_bus.results_ready.connect(on_results)
    racer.start_round(seed=args.seed)

    # Run event loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
