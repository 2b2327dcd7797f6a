"""FastAPI server that exposes the exam and result endpoints."""

from __future__ import annotations

import logging
from threading import Thread

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict, Field
import uvicorn

from exam_app.constants.about import APP_ABOUT_TEXT, APP_NAME, APP_VERSION
from exam_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from exam_app.core.errors import ExamAppError, ValidationFailure
from exam_app.core.exam_exporter import serialize_exams
from exam_app.core.exam_importer import ExamImportError, parse_exams_text
from exam_app.core.exam_manager import ExamManager
from exam_app.core.models import Exam, ExamQuestion, ResultRow, SubmittedAnswer, UserIdentity
from exam_app.server.auth import resolve_identity

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


class QuestionPayload(BaseModel):
    """Payload schema for one authored question."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    question: str
    options: list[str]
    correct_answer: int = Field(alias="correctAnswer")
    marks: int = Field(default=1, gt=0)


class ExamPayload(BaseModel):
    """Payload schema for creating or replacing an exam."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    duration: int = Field(gt=0)
    questions: list[QuestionPayload] = Field(default_factory=list)
    is_active: bool = Field(default=True, alias="isActive")

    def to_exam(self) -> Exam:
        return Exam(
            id=0,
            title=self.title,
            description=self.description,
            duration_minutes=self.duration,
            is_active=self.is_active,
            questions=[
                ExamQuestion(
                    id=question.id or 0,
                    prompt=question.question,
                    options=list(question.options),
                    correct_option_index=question.correct_answer,
                    marks=question.marks,
                )
                for question in self.questions
            ],
        )


class AnswerPayload(BaseModel):
    """Payload schema for one selected option."""

    model_config = ConfigDict(populate_by_name=True)

    question_id: int = Field(alias="questionId")
    selected_answer: int = Field(alias="selectedAnswer")


class SubmissionPayload(BaseModel):
    """Payload schema for a finished exam attempt."""

    model_config = ConfigDict(populate_by_name=True)

    exam_id: int = Field(alias="examId")
    answers: list[AnswerPayload] = Field(default_factory=list)


def exam_to_dict(exam: Exam, include_answer_key: bool) -> dict[str, object]:
    questions: list[dict[str, object]] = []
    for question in exam.questions:
        item: dict[str, object] = {
            "id": question.id,
            "question": question.prompt,
            "options": list(question.options),
            "marks": question.marks,
        }
        if include_answer_key and question.correct_option_index is not None:
            item["correctAnswer"] = question.correct_option_index
        questions.append(item)
    return {
        "id": exam.id,
        "title": exam.title,
        "description": exam.description,
        "duration": exam.duration_minutes,
        "totalMarks": exam.total_marks,
        "isActive": exam.is_active,
        "createdBy": exam.created_by,
        "createdAt": exam.created_at.isoformat(),
        "questions": questions,
    }


def result_row_to_dict(row: ResultRow) -> dict[str, object]:
    result = row.result
    return {
        "id": result.id,
        "student": {"id": result.student_id, "name": row.student_name},
        "exam": {"id": result.exam_id, "title": row.exam_title, "description": row.exam_description},
        "answers": [
            {"questionId": question_id, "selectedAnswer": index}
            for question_id, index in result.answers.items()
        ],
        "score": result.score,
        "totalMarks": result.total_marks,
        "percentage": result.percentage,
        "submittedAt": result.submitted_at.isoformat(),
    }


def _get_exam_manager_dependency(exam_manager: ExamManager):
    def dependency() -> ExamManager:
        return exam_manager

    return dependency


def _get_current_user_dependency(exam_manager: ExamManager, secret_key: str):
    def dependency(
        credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    ) -> UserIdentity:
        token = credentials.credentials if credentials else None
        return resolve_identity(token, secret_key, exam_manager.users)

    return dependency


async def _read_text_body(request: Request) -> str:
    raw = await request.body()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationFailure("Exam document must be UTF-8 text.") from exc


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ExamAppError)
    async def handle_exam_error(request: Request, exc: ExamAppError) -> JSONResponse:
        if exc.status_code in (401, 403):
            logger.info("%s %s refused: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        return JSONResponse(
            status_code=ValidationFailure.status_code,
            content={"message": f"Invalid request: {details}"},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Server error"})


def create_api_app(exam_manager: ExamManager, secret_key: str) -> FastAPI:
    """Create a FastAPI application wired to the provided exam manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION, description=APP_ABOUT_TEXT)
    exam_manager_dep = _get_exam_manager_dependency(exam_manager)
    current_user_dep = _get_current_user_dependency(exam_manager, secret_key)
    _install_error_handlers(app)

    @app.get("/")
    def health() -> dict[str, str]:
        return {"message": "Exam Portal API is running!"}

    # --- Exams ---

    @app.get("/api/exams")
    def list_exams(
        user: UserIdentity = Depends(current_user_dep),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> list[dict[str, object]]:
        return [
            exam_to_dict(exam, include_answer_key=user.is_privileged)
            for exam in manager.list_exams_for(user)
        ]

    @app.get("/api/exams/{exam_id}")
    def get_exam(
        exam_id: int,
        user: UserIdentity = Depends(current_user_dep),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> dict[str, object]:
        exam = manager.get_exam_for(user, exam_id)
        return exam_to_dict(exam, include_answer_key=user.is_privileged)

    @app.post("/api/exams", status_code=201)
    def create_exam(
        payload: ExamPayload,
        user: UserIdentity = Depends(current_user_dep),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> dict[str, object]:
        exam = manager.create_exam(user, payload.to_exam())
        return exam_to_dict(exam, include_answer_key=True)

    @app.put("/api/exams/{exam_id}")
    def update_exam(
        exam_id: int,
        payload: ExamPayload,
        user: UserIdentity = Depends(current_user_dep),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> dict[str, object]:
        exam = manager.update_exam(user, exam_id, payload.to_exam())
        return exam_to_dict(exam, include_answer_key=True)

    @app.delete("/api/exams/{exam_id}")
    def delete_exam(
        exam_id: int,
        user: UserIdentity = Depends(current_user_dep),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> dict[str, str]:
        manager.delete_exam(user, exam_id)
        return {"message": "Exam deleted successfully"}

    @app.post("/api/exams/import", status_code=201)
    def import_exams(
        user: UserIdentity = Depends(current_user_dep),
        manager: ExamManager = Depends(exam_manager_dep),
        document: str = Depends(_read_text_body),
    ) -> list[dict[str, object]]:
        """Create exams from a document in the plain-text authoring format."""
        try:
            drafts = parse_exams_text(document)
        except ExamImportError as exc:
            raise ValidationFailure(str(exc)) from exc
        if not drafts:
            raise ValidationFailure("Exam file did not contain any exams.")
        created = [manager.create_exam(user, draft) for draft in drafts]
        return [exam_to_dict(exam, include_answer_key=True) for exam in created]

    @app.get("/api/exams/{exam_id}/export", response_class=PlainTextResponse)
    def export_exam(
        exam_id: int,
        user: UserIdentity = Depends(current_user_dep),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> str:
        exam = manager.get_exam_for_export(user, exam_id)
        return serialize_exams([exam])

    # --- Results ---

    @app.post("/api/results/submit", status_code=201)
    def submit_exam(
        payload: SubmissionPayload,
        user: UserIdentity = Depends(current_user_dep),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> dict[str, object]:
        answers = [
            SubmittedAnswer(question_id=answer.question_id, selected_option_index=answer.selected_answer)
            for answer in payload.answers
        ]
        result = manager.submit_exam(user, payload.exam_id, answers)
        return {
            "message": "Exam submitted successfully",
            "result": {
                "id": result.id,
                "score": result.score,
                "totalMarks": result.total_marks,
                "percentage": result.percentage,
            },
        }

    @app.get("/api/results/my-results")
    def my_results(
        user: UserIdentity = Depends(current_user_dep),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> list[dict[str, object]]:
        return [result_row_to_dict(row) for row in manager.get_results_for(user)]

    @app.get("/api/results/all")
    def all_results(
        user: UserIdentity = Depends(current_user_dep),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> list[dict[str, object]]:
        return [result_row_to_dict(row) for row in manager.get_all_results(user)]

    return app


def _build_server(app: FastAPI, host: str, port: int) -> uvicorn.Server:
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    return uvicorn.Server(config)


def run_api_server(
    exam_manager: ExamManager,
    secret_key: str,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API in the current thread until interrupted."""
    app = create_api_app(exam_manager, secret_key)
    _build_server(app, host, port).run()


def start_api_server(
    exam_manager: ExamManager,
    secret_key: str,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(exam_manager, secret_key)
    server = _build_server(app, host, port)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="ExamApiServer", daemon=True)
    thread.start()
    return thread
