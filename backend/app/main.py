import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .db import Base, engine, get_db
from .cleanup import purge_old_import_runs
from .errors import InvalidInput, PartitionWriteFailure
from .settings import settings
from .routers import health
from .routers import auth
from .routers import admin
from .routers import content

logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Content Import API")
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(content.router)


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
	return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(PartitionWriteFailure)
async def partition_write_handler(request: Request, exc: PartitionWriteFailure):
	return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_handler(request: Request, exc: RequestValidationError):
	# Import callers expect {"error": ...}; everything else keeps FastAPI's shape
	if request.url.path.startswith("/admin/import"):
		return JSONResponse(status_code=400, content={"error": "request body must be JSON"})
	return await request_validation_exception_handler(request, exc)


@app.get("/info")
def root():
	return {
		"status": "ok",
		"data_dir": str(settings.data_dir),
		"wordlist_dir": str(settings.resolved_wordlist_dir),
		"admin_auth": settings.admin_auth_enabled,
	}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	# Best-effort cleanup of old import history at startup
	try:
		db = next(get_db())
		removed = purge_old_import_runs(db, settings.import_history_days)
		if removed:
			logger.info("Purged %d stale import/session rows", removed)
	except SQLAlchemyError as exc:
		logger.warning("Startup cleanup skipped: %s", exc)
