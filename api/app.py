"""
api/app.py — FastAPI app instance + session middleware
"""

import logging
import re
import threading
import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import SESSION_TTL
from api.routes import router
import api.session as session

SESSION_COOKIE = "quiz_session"
_SID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

logger = logging.getLogger(__name__)


def create_app(cleanup: bool = True) -> FastAPI:
    app = FastAPI(title="Timed Quiz", docs_url=None, redoc_url=None)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Session middleware: read the session ID from the cookie, issue one if missing.
    # A well-formed but unknown ID (server restarted) is recreated so its snapshot resumes.
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session(sid if sid and _SID_PATTERN.match(sid) else None)

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=SESSION_TTL,
        )
        return response

    app.include_router(router)

    # expire idle sessions every 5 minutes
    def _cleanup_loop():
        while True:
            time.sleep(300)
            removed = session.cleanup_expired()
            if removed:
                logger.info(f"Expired {removed} idle session(s)")

    if cleanup:
        t = threading.Thread(target=_cleanup_loop, daemon=True)
        t.start()

    return app
