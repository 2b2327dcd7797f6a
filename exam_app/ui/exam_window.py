"""Qt window in which a student takes one timed exam."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QButtonGroup,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from exam_app.client.exam_session import ExamSession, SessionState
from exam_app.constants.exam_constants import OPTION_COUNT, OPTION_LETTERS
from exam_app.constants.ui_constants import (
    AUTO_SUBMITTED_MESSAGE,
    LOADING_MESSAGE,
    LOW_TIME_MESSAGE,
    NEXT_BUTTON,
    PREVIOUS_BUTTON,
    PROGRESS_TEMPLATE,
    QUESTION_HEADER_TEMPLATE,
    RESULT_TEMPLATE,
    RESUME_BUTTON,
    RETRY_BUTTON,
    SUBMIT_BUTTON,
    SUBMITTED_MESSAGE,
    SUBMITTING_BUTTON,
    WINDOW_TITLE,
)
from exam_app.core.errors import ValidationFailure
from exam_app.core.markdown_renderer import renderer
from exam_app.ui.dialog_helpers import show_error, show_info


class ExamWindow(QMainWindow):
    """Renders an ExamSession and forwards student actions to it."""

    def __init__(self, session: ExamSession) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.session = session
        self._reported_state: SessionState | None = None

        self._build_ui()
        self.session.add_listener(self._on_session_changed)

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout()
        central_widget.setLayout(layout)

        header_row = QHBoxLayout()
        self.title_label = QLabel(LOADING_MESSAGE, self)
        self.title_label.setStyleSheet("font-size: 16pt; font-weight: bold;")
        header_row.addWidget(self.title_label)
        header_row.addStretch()
        self.timer_label = QLabel("--:--", self)
        self.timer_label.setStyleSheet("font-size: 16pt;")
        header_row.addWidget(self.timer_label)
        layout.addLayout(header_row)

        self.position_label = QLabel("", self)
        layout.addWidget(self.position_label)

        self.progress_label = QLabel("", self)
        layout.addWidget(self.progress_label)
        self.progress_bar = QProgressBar(self)
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setTextVisible(False)
        layout.addWidget(self.progress_bar)

        self.question_label = QLabel("", self)
        self.question_label.setTextFormat(Qt.RichText)
        self.question_label.setWordWrap(True)
        layout.addWidget(self.question_label)

        self.option_group = QButtonGroup(self)
        self.option_buttons: list[QRadioButton] = []
        for idx in range(OPTION_COUNT):
            button = QRadioButton(self)
            self.option_group.addButton(button, idx)
            self.option_buttons.append(button)
            layout.addWidget(button)
        self.option_group.idClicked.connect(self._handle_option_clicked)

        self.warning_label = QLabel(LOW_TIME_MESSAGE, self)
        self.warning_label.setStyleSheet("color: #b91c1c;")
        self.warning_label.setVisible(False)
        layout.addWidget(self.warning_label)

        self.error_label = QLabel("", self)
        self.error_label.setStyleSheet("color: #b91c1c;")
        self.error_label.setWordWrap(True)
        self.error_label.setVisible(False)
        layout.addWidget(self.error_label)

        nav_row = QHBoxLayout()
        self.previous_button = QPushButton(PREVIOUS_BUTTON, self)
        self.previous_button.clicked.connect(lambda: self.session.previous_question())
        nav_row.addWidget(self.previous_button)
        self.next_button = QPushButton(NEXT_BUTTON, self)
        self.next_button.clicked.connect(lambda: self.session.next_question())
        nav_row.addWidget(self.next_button)
        nav_row.addStretch()
        self.resume_button = QPushButton(RESUME_BUTTON, self)
        self.resume_button.clicked.connect(lambda: self.session.resume())
        nav_row.addWidget(self.resume_button)
        self.retry_button = QPushButton(RETRY_BUTTON, self)
        self.retry_button.clicked.connect(lambda: self.session.retry())
        nav_row.addWidget(self.retry_button)
        self.submit_button = QPushButton(SUBMIT_BUTTON, self)
        self.submit_button.clicked.connect(lambda: self.session.submit(auto=False))
        nav_row.addWidget(self.submit_button)
        layout.addLayout(nav_row)

        self._refresh()

    def _handle_option_clicked(self, option_index: int) -> None:
        exam = self.session.exam
        if exam is None or not exam.questions:
            return
        question = exam.questions[self.session.current_index]
        try:
            self.session.select_answer(question.id, option_index)
        except ValidationFailure as exc:
            show_error(self, "Invalid answer", exc.message)

    def _on_session_changed(self, session: ExamSession) -> None:
        self._refresh()
        if session.state is self._reported_state:
            return
        self._reported_state = session.state
        if session.state is SessionState.SUBMITTED and session.summary is not None:
            summary = session.summary
            headline = AUTO_SUBMITTED_MESSAGE if session.was_auto_submitted else SUBMITTED_MESSAGE
            detail = RESULT_TEMPLATE.format(
                score=summary.score,
                total=summary.total_marks,
                percentage=summary.percentage,
            )
            show_info(self, "Exam submitted", f"{headline}\n\n{detail}")
        elif session.state is SessionState.FAILED and session.error_message:
            show_error(self, "Exam error", session.error_message)

    def _refresh(self) -> None:
        session = self.session
        exam = session.exam
        in_progress = session.state is SessionState.IN_PROGRESS

        self.timer_label.setText(session.formatted_remaining_time() if exam else "--:--")
        self.warning_label.setVisible(in_progress and session.is_low_on_time())
        self.error_label.setText(session.error_message or "")
        self.error_label.setVisible(bool(session.error_message))

        if exam is None:
            self.title_label.setText(LOADING_MESSAGE if session.state is SessionState.LOADING else WINDOW_TITLE)
            for button in self.option_buttons:
                button.setVisible(False)
            self._update_buttons(in_progress=False)
            return

        self.title_label.setText(exam.title)
        total = session.question_count
        self.progress_label.setText(PROGRESS_TEMPLATE.format(answered=session.answered_count, total=total))
        self.progress_bar.setValue(int(session.progress_percentage()))

        if exam.questions:
            question = exam.questions[session.current_index]
            self.position_label.setText(
                QUESTION_HEADER_TEMPLATE.format(number=session.current_index + 1, total=total)
            )
            self.question_label.setText(renderer.render_question(question.prompt, question.marks))
            selected = session.get_selected_option(question.id)
            self.option_group.setExclusive(False)
            for idx, button in enumerate(self.option_buttons):
                button.setText(f"{OPTION_LETTERS[idx]}. {question.options[idx]}")
                button.setChecked(selected == idx)
                button.setVisible(True)
                button.setEnabled(in_progress)
            self.option_group.setExclusive(True)
        else:
            self.position_label.setText("")
            self.question_label.setText("")
            for button in self.option_buttons:
                button.setVisible(False)

        self._update_buttons(in_progress)

    def _update_buttons(self, in_progress: bool) -> None:
        session = self.session
        last_index = max(0, session.question_count - 1)
        self.previous_button.setEnabled(in_progress and session.current_index > 0)
        self.next_button.setEnabled(in_progress and session.current_index < last_index)
        self.submit_button.setEnabled(in_progress)
        self.submit_button.setText(
            SUBMITTING_BUTTON if session.state is SessionState.SUBMITTING else SUBMIT_BUTTON
        )
        self.retry_button.setVisible(session.can_retry())
        self.resume_button.setVisible(session.can_resume())

    def closeEvent(self, event) -> None:  # noqa: N802 - Qt override
        self.session.close()
        super().closeEvent(event)
