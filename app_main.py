"""Console entry point: follow a live quiz as a student or monitor it as a teacher."""

from __future__ import annotations

import argparse
import signal
import sys

from PySide6.QtCore import QCoreApplication, QTimer

from quiz_live.api import QuizApiClient
from quiz_live.constants.network_constants import API_URL, SERVER_URL
from quiz_live.core import display
from quiz_live.core.live_session import StudentQuizSession, TeacherMonitorSession
from quiz_live.core.models import Role
from quiz_live.core.services import ConnectionManager, RequestRunner
from quiz_live.transport import SocketIOTransport
from quiz_live.utils.logging_config import configure_logging


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--quiz-id", type=int, required=True)
    parser.add_argument("--role", choices=[role.value for role in Role], default=Role.STUDENT.value)
    parser.add_argument("--user-id", help="Local user id (required for students).")
    parser.add_argument("--duration-minutes", type=int, default=None)
    parser.add_argument("--server-url", default=SERVER_URL)
    parser.add_argument("--api-url", default=API_URL)
    parser.add_argument("--token", default=None)
    args = parser.parse_args(argv)
    if args.role == Role.STUDENT.value and not args.user_id:
        parser.error("--user-id is required for students")
    return args


def main(argv: list[str] | None = None) -> int:
    """Initialize logging, open the session, and run the Qt event loop."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logger = configure_logging()
    logger.info("Starting live session for quiz %s as %s", args.quiz_id, args.role)

    app = QCoreApplication(sys.argv[:1])
    transport = SocketIOTransport(server_url=args.server_url, token=args.token)
    connection = ConnectionManager(transport)
    api_client = QuizApiClient(base_url=args.api_url, token=args.token)
    runner = RequestRunner()

    connection.state_changed.connect(lambda state: logger.info("Connection is %s", state.value))

    if args.role == Role.TEACHER.value:
        session = TeacherMonitorSession(args.quiz_id, connection, api_client, runner)
        monitor = session.monitor

        def _log_snapshot(snapshot: object) -> None:
            for line in display.summarize_snapshot(snapshot):
                logger.info(line)
            for alert in monitor.sorted_alerts:
                logger.info(display.format_alert(alert))

        monitor.snapshot_changed.connect(_log_snapshot)
        monitor.notifications_changed.connect(
            lambda notes: logger.info("Recent activity: %s", "; ".join(notes) or "none")
        )
    else:
        session = StudentQuizSession(
            args.quiz_id,
            args.user_id,
            connection,
            api_client,
            runner,
            duration_minutes=args.duration_minutes,
        )
        timer = session.timer

        def _log_time(seconds: int) -> None:
            # Once a minute is enough for a console.
            if seconds % 60 == 0:
                logger.info("Time left %s", timer.format(seconds))

        timer.time_changed.connect(_log_time)
        timer.time_up.connect(lambda: logger.warning("Time is up"))
        session.position.position_changed.connect(
            lambda snapshot: logger.info("Position %s", display.format_position(snapshot))
        )
        session.position.notification.connect(logger.info)

    def _shutdown(*_args: object) -> None:
        session.close()
        connection.disconnect()
        app.quit()

    signal.signal(signal.SIGINT, _shutdown)
    # Give the interpreter a chance to run the SIGINT handler while Qt waits.
    heartbeat = QTimer()
    heartbeat.start(250)
    heartbeat.timeout.connect(lambda: None)

    session.open()
    exit_code = app.exec()
    runner.wait_for_done(2000)
    api_client.close()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
