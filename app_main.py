"""Application entry point for ExamPortal."""

from __future__ import annotations

import argparse
import sys
import time

import httpx

from exam_app.config import Settings, load_settings
from exam_app.constants.about import APP_ABOUT_TEXT, APP_NAME
from exam_app.core.exam_importer import ExamImportError, load_exams_from_file
from exam_app.core.exam_manager import ExamManager
from exam_app.core.models import UserRole
from exam_app.server.api_server import run_api_server, start_api_server
from exam_app.server.auth import issue_access_token
from exam_app.utils.logging_config import configure_logging

_DEMO_USERS = (("Admin", UserRole.ADMIN), ("Student One", UserRole.STUDENT), ("Student Two", UserRole.STUDENT))


def build_manager(settings: Settings) -> ExamManager:
    """Create the manager, register demo users and seed the catalog."""
    logger = configure_logging()
    manager = ExamManager()
    for name, role in _DEMO_USERS:
        user = manager.users.register(name, role)
        token = issue_access_token(user, settings.secret_key, settings.token_minutes)
        logger.info("%s (%s, id %s) token: %s", user.display_name, role.value, user.user_id, token)

    admin = manager.users.get_users()[0]
    if settings.seed_file is not None:
        try:
            imported = load_exams_from_file(settings.seed_file)
        except ExamImportError as exc:
            logger.error("Could not seed exams from %s: %s", settings.seed_file, exc)
        else:
            exams = manager.load_exams(imported.exams, created_by=admin.user_id)
            logger.info("Seeded %d exam(s) from %s", len(exams), settings.seed_file)
    return manager


def _wait_for_server(url: str, attempts: int = 50) -> None:
    for _ in range(attempts):
        try:
            httpx.get(url, timeout=0.5)
            return
        except httpx.TransportError:
            time.sleep(0.1)


def _serve(args: argparse.Namespace, settings: Settings) -> None:
    manager = build_manager(settings)
    run_api_server(manager, settings.secret_key, host=settings.host, port=settings.port)


def _take(args: argparse.Namespace, settings: Settings) -> None:
    # Qt is only needed for the student window
    from PySide6.QtWidgets import QApplication

    from exam_app.client.api_client import ExamApiClient
    from exam_app.client.countdown_timer import QtCountdownTimer
    from exam_app.client.exam_session import ExamSession
    from exam_app.ui import ExamWindow, confirm_submit_exam

    logger = configure_logging()
    api_url = settings.api_url
    token = args.token
    if args.with_server:
        manager = build_manager(settings)
        start_api_server(manager, settings.secret_key, host="127.0.0.1", port=settings.port)
        api_url = f"http://127.0.0.1:{settings.port}/api"
        _wait_for_server(f"http://127.0.0.1:{settings.port}/")
        if token is None:
            student = manager.users.get_users()[1]
            token = issue_access_token(student, settings.secret_key, settings.token_minutes)
    if token is None:
        logger.error("A bearer token is required (use --token or --with-server).")
        sys.exit(2)

    app = QApplication(sys.argv)
    client = ExamApiClient(api_url, token)
    session = ExamSession(exam_id=args.exam_id, gateway=client, timer=QtCountdownTimer())
    window = ExamWindow(session)
    session.set_confirm_submit(lambda answered, total: confirm_submit_exam(window, answered, total))
    window.show()
    session.start()
    exit_code = app.exec()
    session.close()
    client.close()
    sys.exit(exit_code)


def main() -> None:
    parser = argparse.ArgumentParser(prog=APP_NAME, description=APP_ABOUT_TEXT)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the exam API server.")
    serve_parser.set_defaults(handler=_serve)

    take_parser = subparsers.add_parser("take", help="Take an exam in the student window.")
    take_parser.add_argument("exam_id", type=int)
    take_parser.add_argument("--token", help="Bearer token issued for the student.")
    take_parser.add_argument(
        "--with-server",
        action="store_true",
        help="Start a local demo server in the background first.",
    )
    take_parser.set_defaults(handler=_take)

    args = parser.parse_args()
    args.handler(args, load_settings())


if __name__ == "__main__":
    main()
