import asyncio
import logging
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import sessions
from .cleanup import purge_stale_sessions
from .errors import HomeworkError
from .settings import settings
from .routers import health
from .routers import assignments
from .routers import exam
from .routers import results

logger = logging.getLogger("smarthomework")


def configure_logging(level: str) -> None:
	logging.basicConfig(
		level=getattr(logging, level.upper(), logging.INFO),
		format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
	)


app = FastAPI(title="SmartHomework API")
app.include_router(health.router)
app.include_router(assignments.router)
app.include_router(exam.router)
app.include_router(results.router)


@app.exception_handler(HomeworkError)
async def homework_error_handler(request: Request, exc: HomeworkError):
	return JSONResponse(
		status_code=exc.status_code,
		content={"detail": exc.detail, "error": type(exc).__name__},
	)


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}


_cleanup_task: Optional[asyncio.Task] = None


def _purge_once() -> int:
	try:
		return purge_stale_sessions(timedelta(hours=settings.session_max_age_hours))
	except Exception:
		# Keep the watcher alive; the next sweep retries
		logger.exception("Session purge failed")
		return 0


async def _cleanup_watcher():
	# Hourly sweep of abandoned exam sessions
	while True:
		await asyncio.sleep(60 * 60)
		_purge_once()


@app.on_event("startup")
async def startup_event():
	global _cleanup_task
	configure_logging(settings.log_level)
	_purge_once()
	_cleanup_task = asyncio.create_task(_cleanup_watcher())
	logger.info("SmartHomework API started (Gemini configured: %s)", bool(settings.gemini_api_key))


@app.on_event("shutdown")
async def shutdown_event():
	global _cleanup_task
	if _cleanup_task is not None:
		_cleanup_task.cancel()
		_cleanup_task = None
	# Release every running exam timer
	for session in sessions.all_sessions():
		session.close()
