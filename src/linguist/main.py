import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from typing import Callable, Optional

import uvicorn
from redis import Redis
from fastapi import (
    Cookie,
    Depends,
    FastAPI,
    Form,
    Response,
)
from fastapi.responses import JSONResponse

from .config import settings
from .models import AnswerOutcome, InitialOrder, Modality, Question
from .redis_session import LearnSessionStore, get_redis
from .session import (
    EmptyWordSetError,
    LearnSession,
    SessionFinishedError,
    StaleAnswerError,
)
from .stats import RedisStatsRecorder
from .vocabulary import VocabularyManager

logger = logging.getLogger(__name__)


# --- Logging Setup ---
def setup_logging() -> None:
    package_logger = logging.getLogger("linguist")
    package_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    if any(isinstance(h, RotatingFileHandler) for h in package_logger.handlers):
        return

    if not os.path.exists(settings.LOG_DIR):
        os.makedirs(settings.LOG_DIR)
    log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    )
    package_logger.addHandler(file_handler)


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    vocab_manager.load_all()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

vocab_manager = VocabularyManager(f"{settings.VOCAB_DIR}")


# --- Dependencies ---
def get_vocab_manager() -> VocabularyManager:
    return vocab_manager


def get_session_store(client: Redis = Depends(get_redis)) -> LearnSessionStore:
    return LearnSessionStore(client)


def get_stats_recorder(
    client: Redis = Depends(get_redis),
    vocab: VocabularyManager = Depends(get_vocab_manager),
) -> RedisStatsRecorder:
    return RedisStatsRecorder(
        client, set_size=lambda set_id: len(vocab.get_words(set_id))
    )


def get_clock() -> Callable[[], float]:
    return time.time


def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME),
) -> Optional[str]:
    return session_id


def get_active_session(
    session_id: Optional[str] = Depends(get_session_id),
    store: LearnSessionStore = Depends(get_session_store),
    stats: RedisStatsRecorder = Depends(get_stats_recorder),
    clock: Callable[[], float] = Depends(get_clock),
) -> Optional[LearnSession]:
    if not session_id:
        return None

    state = store.load(session_id)
    if state is None:
        return None
    return LearnSession(state, stats_recorder=stats, clock=clock)


def public_question(question: Question) -> dict:
    return question.model_dump(mode="json", exclude={"expected_answer"})


# --- Routes ---
@app.get("/api/topics")
async def get_topics(vocab: VocabularyManager = Depends(get_vocab_manager)):
    return vocab.get_topics()


@app.post("/api/learn/start")
def start_learn_session(
    topic: str = Form(...),
    order: str = Form(settings.DEFAULT_ORDER),
    vocab: VocabularyManager = Depends(get_vocab_manager),
    store: LearnSessionStore = Depends(get_session_store),
    stats: RedisStatsRecorder = Depends(get_stats_recorder),
    clock: Callable[[], float] = Depends(get_clock),
):
    try:
        initial_order = InitialOrder(order)
    except ValueError:
        return JSONResponse({"error": f"Unknown order: {order}"}, status_code=400)

    word_set = vocab.get_set(topic)
    if word_set is None:
        return JSONResponse({"error": f"Unknown topic: {topic}"}, status_code=404)

    try:
        session = LearnSession.start(
            word_set, initial_order, stats_recorder=stats, clock=clock
        )
    except EmptyWordSetError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    new_id = str(uuid.uuid4())
    store.save(new_id, session.to_state())
    logger.info(f"New session: {new_id} [Topic: {topic}, Order: {initial_order.value}]")

    response = JSONResponse(
        {
            "question": public_question(session.current_question()),
            "progress": session.progress(),
        }
    )
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=new_id,
        httponly=True,
        samesite="Lax",
    )
    return response


@app.get("/api/learn/question")
def get_current_question(session: Optional[LearnSession] = Depends(get_active_session)):
    if session is None:
        return JSONResponse({"error": "Session invalid"}, status_code=401)
    if session.is_complete():
        return JSONResponse({"error": "Session complete"}, status_code=409)

    question = session.current_question()
    return {
        "question": public_question(question),
        "progress": session.progress(),
    }


@app.post("/api/learn/answer", response_model=AnswerOutcome)
def submit_answer(
    entry_id: str = Form(...),
    answer: Optional[str] = Form(None),
    selected_option_index: Optional[int] = Form(None),
    elapsed_ms: Optional[float] = Form(None),
    session_id: Optional[str] = Depends(get_session_id),
    session: Optional[LearnSession] = Depends(get_active_session),
    store: LearnSessionStore = Depends(get_session_store),
):
    if session is None:
        return JSONResponse({"error": "Session invalid"}, status_code=401)
    if session.is_complete():
        return JSONResponse({"error": "Session complete"}, status_code=409)

    question = session.current_question()
    if entry_id != question.entry_id:
        return JSONResponse({"error": "Already answered"}, status_code=409)
    if selected_option_index is not None:
        if question.modality != Modality.RECOGNITION or not (
            0 <= selected_option_index < len(question.options)
        ):
            return JSONResponse({"error": "Invalid option"}, status_code=400)
        answer = question.options[selected_option_index]
    if answer is None:
        return JSONResponse({"error": "Missing answer"}, status_code=400)

    if elapsed_ms is None:
        elapsed_ms = session.measured_elapsed_ms()

    try:
        outcome = session.submit_answer(answer, elapsed_ms, entry_id=entry_id)
    except (SessionFinishedError, StaleAnswerError) as e:
        return JSONResponse({"error": str(e)}, status_code=409)

    store.save(session_id, session.to_state())
    return outcome


@app.get("/api/learn/progress")
def get_progress(session: Optional[LearnSession] = Depends(get_active_session)):
    if session is None:
        return JSONResponse({"error": "Session invalid"}, status_code=401)
    return session.progress()


@app.get("/api/learn/result")
def get_result(session: Optional[LearnSession] = Depends(get_active_session)):
    if session is None:
        return JSONResponse({"error": "Session invalid"}, status_code=401)
    if not session.is_complete():
        return JSONResponse({"error": "Session not complete"}, status_code=409)
    return session.result


@app.post("/api/learn/abandon")
def abandon_session(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    session: Optional[LearnSession] = Depends(get_active_session),
    store: LearnSessionStore = Depends(get_session_store),
):
    if session is not None and not session.is_complete():
        session.abandon()
    if session_id:
        store.delete(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}


@app.get("/api/stats")
def get_global_stats(stats: RedisStatsRecorder = Depends(get_stats_recorder)):
    return stats.get_global_stats()


@app.get("/api/stats/{set_id}")
def get_set_stats(set_id: str, stats: RedisStatsRecorder = Depends(get_stats_recorder)):
    return stats.get_set_stats(set_id)


if __name__ == "__main__":
    uvicorn.run("linguist.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
