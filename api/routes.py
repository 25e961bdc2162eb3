"""
api/routes.py — FastAPI endpoints

Thin HTTP layer over the session's QuizController. Every response that
changes what is on screen carries the full ViewState.
Endpoints are plain functions: controller calls can wait on the session lock
while a countdown tick writes the snapshot, so they run in the threadpool.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import BaseModel

import config
from api.sample_questions import SAMPLE_DOCUMENT
import api.session as session

from timed_quiz.errors import InvalidAnswerError, NoActiveSessionError, SessionFinishedError
from timed_quiz.services.quiz_controller import QuizController

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class AnswerBody(BaseModel):
    index: int

class NavigateBody(BaseModel):
    selected: Optional[int] = None


# ── Helpers ──────────────────────────────────────────────────────────────────

def _controller(request: Request) -> QuizController:
    controller = session.get_controller(request.state.session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail="Session expired.")
    return controller


def _call(fn, *args):
    """Run a controller operation and translate core errors to HTTP errors."""
    try:
        return fn(*args)
    except NoActiveSessionError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionFinishedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidAnswerError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _selected(body: Optional[NavigateBody]) -> Optional[int]:
    return body.selected if body is not None else None


def _loaded(controller: QuizController, ok: bool) -> dict:
    if not ok:
        raise HTTPException(status_code=422, detail="Could not load the quiz.")
    return {"ok": True, "view": controller.view_state().model_dump()}


# ── Endpoints ────────────────────────────────────────────────────────────────

@router.post("/api/load")
def load_quiz(request: Request, document: Optional[dict[str, Any]] = Body(None)):
    controller = _controller(request)
    if document is None:
        ok = controller.load_source(config.QUESTIONS_FILE)
    else:
        ok = controller.load(document)
    return _loaded(controller, ok)


@router.post("/api/start-sample")
def start_sample(request: Request):
    controller = _controller(request)
    return _loaded(controller, controller.load(SAMPLE_DOCUMENT))


@router.get("/api/state")
def get_state(request: Request):
    controller = _controller(request)
    return _call(controller.view_state).model_dump()


@router.post("/api/answer")
def answer(request: Request, body: AnswerBody):
    controller = _controller(request)
    entry = _call(controller.answer_current, body.index)
    return {"ok": True, "analytics": entry.model_dump(by_alias=True)}


@router.post("/api/next")
def next_question(request: Request, body: Optional[NavigateBody] = None):
    controller = _controller(request)
    return _call(controller.next, _selected(body)).model_dump()


@router.post("/api/prev")
def prev_question(request: Request, body: Optional[NavigateBody] = None):
    controller = _controller(request)
    return _call(controller.prev, _selected(body)).model_dump()


@router.post("/api/finish")
def finish(request: Request, body: Optional[NavigateBody] = None):
    controller = _controller(request)
    result = _call(controller.finish, _selected(body))
    return result.model_dump(by_alias=True)


@router.get("/api/results")
def get_results(request: Request):
    controller = _controller(request)
    if controller.result is None:
        raise HTTPException(status_code=400, detail="The quiz has not been finished yet.")
    return controller.result.model_dump(by_alias=True)


@router.get("/api/review")
def review(request: Request):
    controller = _controller(request)
    rows = _call(controller.show_review)
    return {"rows": [row.model_dump() for row in rows]}


@router.post("/api/restart")
def restart(request: Request):
    controller = _controller(request)
    return _call(controller.restart).model_dump()


@router.post("/api/reset")
def reset_session(request: Request):
    session.reset(request.state.session_id)
    return {"ok": True}
