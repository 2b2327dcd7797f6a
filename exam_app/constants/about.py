"""Static metadata describing ExamPortal."""

APP_NAME = "ExamPortal"
APP_VERSION = "0.1"
APP_ABOUT_TEXT = (
    "ExamPortal lets administrators author timed multiple-choice exams and "
    "students take them from a desktop client. Scores are computed on the server."
)
