import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlmodel import Session

from app.api.error_handling import register_exception_handlers
from app.api.v1.router import api_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.core.security import get_lockout_policy, get_token_config
from app.db import session as db_session
from app.db.init_db import init_db
from app.db.seed import seed_admin

configure_logging(settings.LOG_LEVEL)

TRACE_HEADER = 'X-Trace-Id'


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Refuse to start without signing material.
    get_token_config()
    get_lockout_policy()
    init_db()
    with Session(db_session.engine) as session:
        seed_admin(session, settings)
    yield

app = FastAPI(title=settings.PROJECT_NAME, debug=settings.DEBUG, lifespan=lifespan)

allow_origins = settings.CORS_ORIGINS
allow_credentials = '*' not in allow_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.middleware('http')
async def trace_requests(request: Request, call_next):
    trace_id = request.headers.get(TRACE_HEADER) or uuid4().hex
    request.state.trace_id = trace_id
    started = time.perf_counter()
    with logger.contextualize(trace_id=trace_id):
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            '{} {} -> {} in {:.1f}ms',
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
    response.headers[TRACE_HEADER] = trace_id
    return response


register_exception_handlers(app)
app.include_router(api_router)
