"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the quiz backend. Controllers
are intentionally thin: they accept requests, delegate to services, and
wrap results in the `{success, data, error}` envelope.

Endpoints implemented:
- POST /api/quizzes
- GET /api/quizzes
- GET /api/quizzes/{quiz_id}
- POST /api/quizzes/{quiz_id}/questions
- GET /api/quizzes/{quiz_id}/questions
- POST /api/quizzes/{quiz_id}/submit
- GET /health
"""

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import List
import json
import logging
import time
import uuid
from . import services
from .config import settings
from .errors import CrossReferenceError, NotFoundError, QuizNotFound, ValidationError
from .repositories import QuizStore, get_store
from .schemas import (
    ApiResponse,
    CreateQuizIn,
    PublicQuestionOut,
    QuestionIn,
    QuestionOut,
    QuizOut,
    QuizSubmission,
    QuizSummaryOut,
    SubmissionResultOut,
)

app = FastAPI(title="Quiz API")
logger = logging.getLogger("quiz_api.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
            ensure_ascii=True,
        ),
    )
    return response


def _error_body(message: str) -> dict:
    return {"success": False, "data": None, "error": message}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else json.dumps(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=_error_body(detail), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # malformed bodies and unknown question types are client errors, not 422s
    reasons = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        reasons.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(status_code=400, content=_error_body("; ".join(reasons) or "invalid request"))


@app.post('/api/quizzes', status_code=201, response_model=ApiResponse[QuizOut])
def create_quiz(payload: CreateQuizIn, store: QuizStore = Depends(get_store)):
    """Create a new, empty quiz.

    The title is trimmed; an empty title is rejected with 400.
    """
    svc = services.QuizService(store)
    try:
        quiz = svc.create_quiz(payload.title)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ApiResponse[QuizOut].ok(QuizOut.from_quiz(quiz))


@app.get('/api/quizzes', response_model=ApiResponse[List[QuizSummaryOut]])
def list_quizzes(store: QuizStore = Depends(get_store)):
    """List all quizzes with their question counts."""
    quizzes = services.QuizService(store).list_quizzes()
    return ApiResponse[List[QuizSummaryOut]].ok([QuizSummaryOut.from_quiz(q) for q in quizzes])


@app.get('/api/quizzes/{quiz_id}', response_model=ApiResponse[QuizSummaryOut])
def get_quiz(quiz_id: int, store: QuizStore = Depends(get_store)):
    """Return a single quiz summary."""
    try:
        quiz = services.QuizService(store).get_quiz(quiz_id)
    except QuizNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ApiResponse[QuizSummaryOut].ok(QuizSummaryOut.from_quiz(quiz))


@app.post('/api/quizzes/{quiz_id}/questions', status_code=201, response_model=ApiResponse[QuestionOut])
def add_question(quiz_id: int, payload: QuestionIn, store: QuizStore = Depends(get_store)):
    """Add a question to a quiz.

    The response includes the minted option ids and the correct answers,
    so only quiz authors should call this endpoint.
    """
    svc = services.QuizService(store)
    try:
        question = svc.add_question(quiz_id, payload.to_definition())
    except QuizNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ApiResponse[QuestionOut].ok(QuestionOut.from_question(question))


@app.get('/api/quizzes/{quiz_id}/questions', response_model=ApiResponse[List[PublicQuestionOut]])
def get_quiz_questions(quiz_id: int, store: QuizStore = Depends(get_store)):
    """Return a quiz's questions for quiz takers, without correct answers."""
    try:
        questions = services.QuizService(store).get_quiz_questions(quiz_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ApiResponse[List[PublicQuestionOut]].ok([PublicQuestionOut.from_question(q) for q in questions])


@app.post('/api/quizzes/{quiz_id}/submit', response_model=ApiResponse[SubmissionResultOut])
def submit_answers(quiz_id: int, submission: QuizSubmission, store: QuizStore = Depends(get_store)):
    """Score a submission.

    The request body contains a list of {questionId, selectedOptions,
    textAnswer?} items. `total` in the response is the number of
    questions in the quiz.
    """
    svc = services.GradingService(store)
    try:
        result = svc.score_submission(quiz_id, [a.to_answer() for a in submission.answers])
    except QuizNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (NotFoundError, CrossReferenceError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ApiResponse[SubmissionResultOut].ok(SubmissionResultOut.from_result(result))


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
