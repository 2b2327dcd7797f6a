"""Qt UI constants used by the student exam window."""

WINDOW_TITLE: str = "ExamPortal"
LOADING_MESSAGE: str = "Loading exam..."
PREVIOUS_BUTTON: str = "Previous"
NEXT_BUTTON: str = "Next"
SUBMIT_BUTTON: str = "Submit Exam"
SUBMITTING_BUTTON: str = "Submitting..."
RETRY_BUTTON: str = "Retry Submission"
RESUME_BUTTON: str = "Back to Exam"
LOW_TIME_MESSAGE: str = "Less than 5 minutes remaining! Please complete your exam soon."
CONFIRM_SUBMIT_TEMPLATE: str = "You have answered {answered}/{total} questions. Submit exam?"
AUTO_SUBMITTED_MESSAGE: str = "Time's up! Your exam has been submitted automatically."
SUBMITTED_MESSAGE: str = "Exam submitted successfully!"
RESULT_TEMPLATE: str = "Score: {score}/{total} ({percentage:.2f}%)"
PROGRESS_TEMPLATE: str = "{answered}/{total} answered"
QUESTION_HEADER_TEMPLATE: str = "Question {number} of {total}"
