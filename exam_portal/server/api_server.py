"""FastAPI server that exposes the candidate pages and exam endpoints."""

from __future__ import annotations

from contextlib import asynccontextmanager, contextmanager
import logging
from threading import Thread
from typing import AsyncIterator, Iterator

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
import uvicorn

from exam_portal.constants.exam_constants import NOT_AUTHENTICATED_MESSAGE
from exam_portal.constants.network_constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    IDENTITY_COOKIE,
    IDENTITY_COOKIE_MAX_AGE,
)
from exam_portal.core.exam_manager import ExamManager, ExamNotFoundError
from exam_portal.core.identity import IdentityCookieCodec, PortalContext, identity_from_email
from exam_portal.core.markdown_renderer import renderer
from exam_portal.core.models import Question
from exam_portal.core.services.active_exam import ActiveExam
from exam_portal.core.services.exam_session import ExamFetchError
from exam_portal.core.services.question_repository import NoQuestionsError, SubjectNotFoundError
from exam_portal.core.services.result_view import ResultNotFoundError, ResultView
from exam_portal.core.services.submission import NotAuthenticatedError, SubmissionError
from exam_portal.server.pages import (
    EXAM_PAGE_HTML,
    HOME_PAGE_HTML,
    LOGIN_PAGE_HTML,
    RESULT_PAGE_HTML,
)

logger = logging.getLogger(__name__)


class LoginPayload(BaseModel):
    """Payload schema for candidate sign-in."""

    email: str
    display_name: str | None = None


class SelectPayload(BaseModel):
    option_id: int


class GotoPayload(BaseModel):
    index: int


class SubmitModalPayload(BaseModel):
    open: bool


class VisibilityPayload(BaseModel):
    visible: bool


class WindowPayload(BaseModel):
    """Outer and inner window dimensions sampled by the exam page."""

    outer_width: int
    inner_width: int
    outer_height: int
    inner_height: int


@contextmanager
def _http_errors() -> Iterator[None]:
    """Translate domain exceptions into HTTP responses."""
    try:
        yield
    except NotAuthenticatedError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except SubmissionError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except (ExamNotFoundError, ResultNotFoundError, SubjectNotFoundError) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except NoQuestionsError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ExamFetchError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except (ValueError, IndexError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


def _question_payload(question: Question) -> dict[str, object]:
    # The correct option id stays on the server until the attempt is saved.
    return {
        "id": question.id,
        "number": question.number,
        "html": renderer.render_fragment(question.prompt),
        "comprehension_html": (
            renderer.render_fragment(question.comprehension) if question.comprehension else None
        ),
        "image_url": question.image_url,
        "options": [
            {"id": option.id, "html": renderer.render_inline(option.text)}
            for option in question.options
        ],
    }


def _exam_payload(active: ActiveExam) -> dict[str, object]:
    payload = active.snapshot()
    question = active.session.current_question
    payload["question"] = _question_payload(question) if question else None
    return payload


def _result_payload(result: ResultView) -> dict[str, object]:
    attempt = result.attempt
    return {
        "attempt": {
            "id": attempt.id,
            "subject": attempt.subject,
            "correct": attempt.correct,
            "wrong": attempt.wrong,
            "not_attended": attempt.not_attended,
            "total_questions": attempt.total_questions,
            "created_at": attempt.created_at.isoformat(),
        },
        "score_percent": result.score_percent,
        "source": result.source,
        "questions": [
            {
                "id": view.id,
                "number": view.number,
                "html": renderer.render_fragment(view.question),
                "comprehension_html": (
                    renderer.render_fragment(view.comprehension) if view.comprehension else None
                ),
                "image_url": view.image_url,
                "options": [
                    {"id": option.id, "html": renderer.render_inline(option.text)}
                    for option in view.options
                ],
                "correct_option_id": view.correct_option_id,
                "selected_option_id": view.selected_option_id,
                "status": view.status.value,
            }
            for view in result.questions
        ],
    }


def _identity_payload(context: PortalContext) -> dict[str, object]:
    identity = context.identity
    return {
        "authenticated": context.is_authenticated,
        "role": context.role,
        "user_id": identity.user_id if identity else None,
        "display_name": identity.display_name if identity else None,
        "email": identity.email if identity else None,
    }


def _get_exam_manager_dependency(exam_manager: ExamManager):
    def dependency() -> ExamManager:
        return exam_manager

    return dependency


def _get_context_dependency(codec: IdentityCookieCodec):
    def dependency(request: Request) -> PortalContext:
        return PortalContext(identity=codec.decode(request.cookies.get(IDENTITY_COOKIE)))

    return dependency


def create_api_app(exam_manager: ExamManager, secret_key: str) -> FastAPI:
    """Create a FastAPI application wired to the provided exam manager.

    Session routes are ``async`` so that every action runs on the event loop
    that owns the session timers. Backend I/O they need runs in the
    threadpool, off that loop.
    """

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        exam_manager.shutdown()
        logger.info("API server stopped; all exam sessions closed")

    app = FastAPI(title="Exam Portal API", version="0.1.0", lifespan=lifespan)
    manager_dep = _get_exam_manager_dependency(exam_manager)
    codec = IdentityCookieCodec(secret_key)
    context_dep = _get_context_dependency(codec)

    def require_identity(context: PortalContext = Depends(context_dep)) -> PortalContext:
        if context.identity is None:
            raise HTTPException(status_code=401, detail=NOT_AUTHENTICATED_MESSAGE)
        return context

    def exam_for(
        session_id: str,
        manager: ExamManager = Depends(manager_dep),
        context: PortalContext = Depends(require_identity),
    ) -> ActiveExam:
        with _http_errors():
            return manager.get_exam(session_id, context)

    # --- Pages ---

    @app.get("/", response_class=HTMLResponse)
    def serve_home_page() -> str:
        return HOME_PAGE_HTML

    @app.get("/login", response_class=HTMLResponse)
    def serve_login_page() -> str:
        return LOGIN_PAGE_HTML

    @app.get("/exam/{subject_slug}", response_class=HTMLResponse)
    def serve_exam_page(subject_slug: str) -> str:
        return EXAM_PAGE_HTML

    @app.get("/result", response_class=HTMLResponse)
    def serve_result_page() -> str:
        return RESULT_PAGE_HTML

    # --- Identity ---

    @app.get("/api/identity")
    def get_identity(context: PortalContext = Depends(context_dep)) -> dict[str, object]:
        return _identity_payload(context)

    @app.post("/api/login")
    def login(payload: LoginPayload, response: Response) -> dict[str, object]:
        try:
            identity = identity_from_email(payload.email, payload.display_name)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        response.set_cookie(
            key=IDENTITY_COOKIE,
            value=codec.encode(identity),
            max_age=IDENTITY_COOKIE_MAX_AGE,
            samesite="lax",
            httponly=True,
        )
        logger.info("Candidate %s signed in", identity.user_id)
        return _identity_payload(PortalContext(identity=identity))

    @app.post("/api/logout")
    def logout(response: Response) -> dict[str, object]:
        response.delete_cookie(IDENTITY_COOKIE)
        return _identity_payload(PortalContext())

    # --- Subjects ---

    @app.get("/api/subjects")
    def list_subjects(manager: ExamManager = Depends(manager_dep)) -> dict[str, object]:
        with _http_errors():
            subjects = manager.list_subjects()
        return {
            "subjects": [
                {"id": subject.id, "name": subject.name, "slug": subject.slug, "question_count": subject.question_count}
                for subject in subjects
            ]
        }

    # --- Exam sessions ---

    @app.post("/api/exams/{subject_slug}/start", status_code=201)
    async def start_exam(
        subject_slug: str,
        manager: ExamManager = Depends(manager_dep),
        context: PortalContext = Depends(require_identity),
    ) -> dict[str, object]:
        with _http_errors():
            subject, questions = await run_in_threadpool(manager.load_exam, subject_slug, context)
            active = manager.open_exam(subject, questions, context)
        return _exam_payload(active)

    @app.get("/api/sessions/{session_id}")
    async def get_session(active: ActiveExam = Depends(exam_for)) -> dict[str, object]:
        return _exam_payload(active)

    @app.post("/api/sessions/{session_id}/select")
    async def select_option(payload: SelectPayload, active: ActiveExam = Depends(exam_for)) -> dict[str, object]:
        with _http_errors():
            active.session.select_option(payload.option_id)
        return _exam_payload(active)

    @app.post("/api/sessions/{session_id}/review")
    async def mark_for_review(active: ActiveExam = Depends(exam_for)) -> dict[str, object]:
        with _http_errors():
            active.session.mark_for_review()
        return _exam_payload(active)

    @app.post("/api/sessions/{session_id}/goto")
    async def go_to_question(payload: GotoPayload, active: ActiveExam = Depends(exam_for)) -> dict[str, object]:
        with _http_errors():
            active.session.go_to_question(payload.index)
        return _exam_payload(active)

    @app.post("/api/sessions/{session_id}/next")
    async def next_question(active: ActiveExam = Depends(exam_for)) -> dict[str, object]:
        with _http_errors():
            active.session.next_question()
        return _exam_payload(active)

    @app.post("/api/sessions/{session_id}/previous")
    async def previous_question(active: ActiveExam = Depends(exam_for)) -> dict[str, object]:
        with _http_errors():
            active.session.previous_question()
        return _exam_payload(active)

    @app.post("/api/sessions/{session_id}/submit-modal")
    async def toggle_submit_modal(
        payload: SubmitModalPayload,
        active: ActiveExam = Depends(exam_for),
    ) -> dict[str, object]:
        with _http_errors():
            if payload.open:
                active.session.open_submit_modal()
            elif not active.session.close_submit_modal():
                raise HTTPException(status_code=409, detail="Time is up; the exam must be submitted.")
        return _exam_payload(active)

    @app.post("/api/sessions/{session_id}/visibility")
    async def report_visibility(
        payload: VisibilityPayload,
        active: ActiveExam = Depends(exam_for),
    ) -> dict[str, object]:
        active.report_visibility(payload.visible)
        return _exam_payload(active)

    @app.post("/api/sessions/{session_id}/window")
    async def report_window(payload: WindowPayload, active: ActiveExam = Depends(exam_for)) -> dict[str, object]:
        active.report_window_size(
            payload.outer_width,
            payload.inner_width,
            payload.outer_height,
            payload.inner_height,
        )
        return _exam_payload(active)

    @app.post("/api/sessions/{session_id}/warning/dismiss")
    async def dismiss_warning(active: ActiveExam = Depends(exam_for)) -> dict[str, object]:
        if not active.monitor.dismiss_warning():
            raise HTTPException(status_code=409, detail="This warning cannot be dismissed.")
        return _exam_payload(active)

    @app.post("/api/sessions/{session_id}/submit")
    async def submit_exam(
        active: ActiveExam = Depends(exam_for),
        manager: ExamManager = Depends(manager_dep),
        context: PortalContext = Depends(require_identity),
    ) -> dict[str, object]:
        with _http_errors():
            pending = manager.begin_submission(active, context)
            try:
                receipt = await run_in_threadpool(manager.persist_submission, pending)
            except SubmissionError as exc:
                manager.fail_submission(active, exc)
                raise
            manager.complete_submission(active)
        return {
            "attempt_id": receipt.attempt.id,
            "redirect_url": receipt.redirect_url,
            "answers_saved": receipt.answers_saved,
        }

    @app.post("/api/sessions/{session_id}/leave", status_code=204)
    async def leave_exam(
        session_id: str,
        manager: ExamManager = Depends(manager_dep),
        context: PortalContext = Depends(require_identity),
    ) -> Response:
        with _http_errors():
            manager.leave_exam(session_id, context)
        return Response(status_code=204)

    # --- Results ---

    @app.get("/api/results/{attempt_id}")
    def get_result(
        attempt_id: str,
        manager: ExamManager = Depends(manager_dep),
        context: PortalContext = Depends(require_identity),
    ) -> dict[str, object]:
        with _http_errors():
            result = manager.load_result(attempt_id, context)
        return _result_payload(result)

    return app


def start_api_server(
    exam_manager: ExamManager,
    secret_key: str,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(exam_manager, secret_key)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="ExamApiServer", daemon=True)
    thread.start()
    return thread
