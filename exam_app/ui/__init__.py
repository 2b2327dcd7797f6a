"""Qt UI components for the student application."""

from .dialog_helpers import confirm_submit_exam, show_error, show_info
from .exam_window import ExamWindow

__all__ = [
    "ExamWindow",
    "confirm_submit_exam",
    "show_error",
    "show_info",
]
