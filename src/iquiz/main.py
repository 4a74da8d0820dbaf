import logging
import os
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

import uvicorn
from fastapi import (
    Cookie,
    Depends,
    FastAPI,
    Form,
    Request,
    Response,
)
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse
from redis import Redis

from .config import settings
from .controller import QuizController
from .errors import InvalidStateTransition, InvalidURL
from .fetcher import QuizDataFetcher
from .models import AnswerRecord, Preferences, RefreshResult, SessionData, SessionState
from .preferences import PreferencesStore
from .reachability import SocketReachability
from .redis_session import get_redis
from .session import QuizSession

# --- Logging Setup ---
logger = logging.getLogger(__name__)
package_logger = logging.getLogger(__package__)
package_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

if not os.path.exists(settings.LOG_DIR):
    os.makedirs(settings.LOG_DIR)
log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
file_handler = RotatingFileHandler(
    log_path, maxBytes=settings.LOG_MAX_BYTES, backupCount=settings.LOG_BACKUP_COUNT
)
file_handler.setFormatter(
    logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
)
package_logger.addHandler(file_handler)


controller = QuizController(
    fetcher=QuizDataFetcher(reachability=SocketReachability()),
    store=PreferencesStore(get_redis()),
)


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    await run_in_threadpool(controller.startup)
    yield
    await run_in_threadpool(controller.shutdown)


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
)


# --- Dependencies ---
def get_controller() -> QuizController:
    return controller


def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME),
) -> Optional[str]:
    return session_id


def get_active_session(
    session_id: Optional[str] = Depends(get_session_id),
    client: Redis = Depends(get_redis),
) -> Optional[QuizSession]:
    if not session_id:
        return None

    session_data = client.get(session_id)
    if not session_data:
        return None

    data = SessionData.model_validate_json(session_data)

    if datetime.now() - data.created_at > timedelta(
        minutes=settings.SESSION_TIMEOUT_MINUTES
    ):
        client.delete(session_id)
        return None
    return QuizSession.from_data(data)


def save_session(client: Redis, session_id: str, session: QuizSession) -> None:
    client.set(
        session_id,
        session.data.model_dump_json(),
        ex=timedelta(minutes=settings.SESSION_TIMEOUT_MINUTES),
    )


def quiz_view(session: QuizSession) -> Dict[str, Any]:
    view: Dict[str, Any] = {
        "topic": session.topic.title,
        "state": session.state.value,
        "current_index": session.current_index,
        "total_questions": session.total_questions,
        "score": session.score,
        "progress": session.progress,
    }
    if session.state is SessionState.ANSWERING:
        view["question"] = session.current_question.text
        view["options"] = session.current_question.answers
    elif session.state is SessionState.REVIEWING:
        view["answer_record"] = session.review()
    else:
        view["score_text"] = session.score_text
    return view


def session_invalid() -> JSONResponse:
    return JSONResponse({"error": "Session invalid"}, status_code=401)


@app.exception_handler(InvalidStateTransition)
async def invalid_transition_handler(request: Request, exc: InvalidStateTransition):
    logger.warning(f"{request.url.path}: {exc.message}")
    return JSONResponse({"error": exc.message}, status_code=409)


# --- Topics ---
@app.get("/api/topics")
def get_topics(controller: QuizController = Depends(get_controller)):
    return [
        {
            "id": topic.id,
            "title": topic.title,
            "desc": topic.desc,
            "count": len(topic.questions),
        }
        for topic in controller.topics
    ]


@app.post("/api/refresh", response_model=RefreshResult)
def refresh_topics(controller: QuizController = Depends(get_controller)):
    return controller.refresh()


@app.get("/api/notice")
def get_notice(controller: QuizController = Depends(get_controller)):
    return {"notice": controller.notice}


@app.delete("/api/notice")
def dismiss_notice(controller: QuizController = Depends(get_controller)):
    controller.dismiss_notice()
    return {"status": "success"}


# --- Settings ---
@app.get("/api/settings", response_model=Preferences)
def get_settings(controller: QuizController = Depends(get_controller)):
    return controller.preferences


@app.post("/api/settings", response_model=Preferences)
def save_settings(
    url: str = Form(...),
    refresh_interval: float = Form(
        ..., gt=0, le=settings.MAX_REFRESH_INTERVAL, allow_inf_nan=False
    ),
    controller: QuizController = Depends(get_controller),
):
    try:
        prefs = controller.update_settings(url, refresh_interval)
    except InvalidURL as e:
        return JSONResponse({"error": e.message}, status_code=400)
    logger.info(
        f"Settings saved [URL: {prefs.data_url}, Interval: {prefs.refresh_interval}]"
    )
    return prefs


# --- Quiz ---
@app.post("/start", response_class=RedirectResponse)
def start_quiz_session(
    topic_id: str = Form(...),
    controller: QuizController = Depends(get_controller),
    client: Redis = Depends(get_redis),
):
    try:
        session = controller.start_session(topic_id)
    except KeyError:
        return JSONResponse({"error": "Unknown topic"}, status_code=404)

    new_id = str(uuid.uuid4())
    save_session(client, new_id, session)

    logger.info(f"New session: {new_id} [Topic: {session.topic.title}]")

    redirect = RedirectResponse(url="/api/quiz", status_code=302)
    redirect.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=new_id,
        httponly=True,
        samesite="Lax",
    )
    return redirect


@app.get("/api/quiz")
def get_quiz_state(session: Optional[QuizSession] = Depends(get_active_session)):
    if not session:
        return session_invalid()
    return quiz_view(session)


@app.post("/submit_answer", response_model=AnswerRecord)
def submit_answer(
    selected_option_index: int = Form(...),
    session_id: Optional[str] = Depends(get_session_id),
    session: Optional[QuizSession] = Depends(get_active_session),
    client: Redis = Depends(get_redis),
):
    if not session:
        return session_invalid()
    try:
        record = session.submit_choice(selected_option_index)
    except ValueError:
        return JSONResponse({"error": "Invalid option"}, status_code=400)
    save_session(client, session_id, session)
    return record


@app.post("/advance")
def advance(
    session_id: Optional[str] = Depends(get_session_id),
    session: Optional[QuizSession] = Depends(get_active_session),
    client: Redis = Depends(get_redis),
):
    if not session:
        return session_invalid()
    session.advance()
    save_session(client, session_id, session)
    return quiz_view(session)


@app.get("/api/result")
def get_result_data(session: Optional[QuizSession] = Depends(get_active_session)):
    if not session:
        return session_invalid()
    if not session.is_finished:
        return JSONResponse({"error": "Quiz not finished"}, status_code=409)

    total = session.total_questions
    score = round((session.score / total) * 100) if total > 0 else 0
    return {
        "correct_count": session.score,
        "total_questions": total,
        "score_percentage": score,
        "score_text": session.score_text,
        "answers": session.recorded_answers,
    }


@app.post("/api/reset")
def reset_session(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    client: Redis = Depends(get_redis),
):
    if session_id:
        client.delete(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}


if __name__ == "__main__":
    uvicorn.run("iquiz.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
