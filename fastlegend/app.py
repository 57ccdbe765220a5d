"""Application entry point: a headless leaderboard monitor and console typing test."""

import argparse
import logging
import signal
import sys
from typing import List, Optional

from PySide6.QtCore import QCoreApplication, QSocketNotifier

from fastlegend.core.api import LeaderboardClient
from fastlegend.core.config import load_config
from fastlegend.core.countdown import SessionTimer
from fastlegend.core.leaderboard import LeaderboardView
from fastlegend.core.metrics import Mode
from fastlegend.core.phrases import PhraseRepository
from fastlegend.core.polling import LeaderboardPoller
from fastlegend.core.practice import PracticeController
from fastlegend.core.preferences import PreferenceStore
from fastlegend.ui.models import leaderboard_rows


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fastlegend",
        description="Watch the fastlegend leaderboard, or take a typing test from the console.",
    )
    parser.add_argument(
        "--practice",
        action="store_true",
        help="Take one typing test: type each shown phrase and press Enter",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        default=None,
        help="Test mode (default: the stored preference)",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=None,
        help="Seconds for time tests, words for word tests",
    )
    return parser


def log_leaderboard(view: LeaderboardView) -> None:
    stats = view.stats
    logging.info(
        "%d players, top speed %.0f wpm, best accuracy %.1f%%, %d tests",
        stats.total_players,
        stats.max_wpm,
        stats.max_accuracy,
        stats.total_tests,
    )
    for row in leaderboard_rows(view):
        marker = " (you)" if row.is_current_user else ""
        logging.info("#%d %s, %s: %s wpm, %s%s", row.rank, row.name, row.location, row.wpm, row.accuracy, marker)
    if view.current_user_rank is not None:
        logging.info("Your rank: #%d", view.current_user_rank)


def attach_console(timer: SessionTimer, app: QCoreApplication) -> QSocketNotifier:
    """Feed lines typed on stdin into ``timer``; end of input finishes the test."""
    logging.info("Type: %s", timer.session.target_text)
    notifier = QSocketNotifier(sys.stdin.fileno(), QSocketNotifier.Type.Read, app)

    def on_ready() -> None:
        line = sys.stdin.readline()
        if not line:
            notifier.setEnabled(False)
            timer.finish()
            return
        target = timer.session.target_text
        if not timer.type_text(line.rstrip("\n")):
            logging.warning("Input ignored, the test is paused or over")
        elif not timer.session.is_finished and timer.session.target_text != target:
            logging.info("Type: %s", timer.session.target_text)

    notifier.activated.connect(on_ready)
    return notifier


def run(argv: Optional[List[str]] = None) -> None:
    """Poll the leaderboard service and log each refreshed ranking until interrupted.

    With ``--practice`` a single typing test runs on the console first; its
    result is stored and the leaderboard is re-ranked before the app exits.
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)
    configure_logging()
    app = QCoreApplication(sys.argv)
    app.setApplicationName("fastlegend")

    config = load_config()
    preferences = PreferenceStore()
    client = LeaderboardClient(config.api_base_url, timeout=config.request_timeout)

    poller = LeaderboardPoller(
        client.fetch_entries,
        preferences.current_session,
        interval_seconds=config.poll_interval_seconds,
        limit=config.leaderboard_size,
    )
    poller.refreshed.connect(log_leaderboard)
    handle = poller.start()

    if args.practice:
        controller = PracticeController(config, PhraseRepository(), preferences, poller=poller)
        controller.completed.connect(lambda _: app.quit())
        try:
            timer = controller.start_test(args.mode, args.duration)
        except ValueError as e:
            parser.error(str(e))
        attach_console(timer, app)

    app.aboutToQuit.connect(handle.cancel)
    app.aboutToQuit.connect(client.close)
    signal.signal(signal.SIGINT, lambda *_: app.quit())

    sys.exit(app.exec())
