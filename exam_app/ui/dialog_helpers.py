"""Helper functions for common dialog patterns in the student UI."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget

from exam_app.constants.ui_constants import CONFIRM_SUBMIT_TEMPLATE


def confirm_submit_exam(parent: QWidget, answered: int, total: int) -> bool:
    """Ask the student to confirm a manual submission.

    Args:
        parent: Parent widget for the dialog
        answered: Number of questions with a selected option
        total: Number of questions in the exam

    Returns:
        True if the student confirmed, False otherwise
    """
    reply = QMessageBox.question(
        parent,
        "Submit Exam",
        CONFIRM_SUBMIT_TEMPLATE.format(answered=answered, total=total),
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.information(parent, title, message)
