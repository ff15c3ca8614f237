from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..coverage import coverage_report, find_exercises_for_words
from ..db import get_db
from ..deps import get_registry, get_store, get_wordlists, import_lock
from ..errors import InvalidInput
from ..importer import ImportOutcome, preview, run_import
from ..models import ImportRun
from ..settings import settings
from ..storage import PartitionStore
from ..wordlists import CefrWordlists, WordlistRegistry
from .auth import User, get_current_admin


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class ImportRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    items: List[Any]
    mode: str = "append"
    default_level: Optional[StrictInt] = Field(default=None, alias="defaultLevel")


class LookupRequest(BaseModel):
    words: List[str]


def _unpack(payload: Any) -> ImportRequest:
    # The uploader may send the file as-is: a bare array of items.
    if isinstance(payload, list):
        payload = {"items": payload}
    if not isinstance(payload, dict):
        raise InvalidInput("body must be an items array or an object with items")
    if not isinstance(payload.get("items"), list) or not payload["items"]:
        raise InvalidInput("items array required")
    try:
        return ImportRequest.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise InvalidInput(f"{where}: {first.get('msg')}") from exc


def _record_run(db: Session, user: User, req: ImportRequest, default_level: int, outcome: ImportOutcome) -> None:
    try:
        db.add(ImportRun(
            username=user.username,
            mode=req.mode,
            default_level=default_level,
            item_count=outcome.item_count,
            skipped_count=outcome.skipped,
            added_total=outcome.added_total,
            summary_json=json.dumps([p.summary() for p in outcome.partitions]),
        ))
        db.commit()
    except SQLAlchemyError as exc:
        # Partition files are already written; history is best-effort.
        db.rollback()
        logger.error("Could not record import run: %s", exc)


@router.post("/import")
async def import_items(
    payload: Any = Body(...),
    user: User = Depends(get_current_admin),
    store: PartitionStore = Depends(get_store),
    registry: WordlistRegistry = Depends(get_registry),
    db: Session = Depends(get_db),
):
    req = _unpack(payload)
    default_level = settings.default_level if req.default_level is None else req.default_level
    async with import_lock:
        outcome = await run_in_threadpool(
            run_import, req.items, store, registry.get(), req.mode, default_level
        )
    _record_run(db, user, req, default_level, outcome)
    return outcome.to_response()


@router.post("/import/preview")
async def import_preview(
    payload: Any = Body(...),
    user: User = Depends(get_current_admin),
    registry: WordlistRegistry = Depends(get_registry),
):
    req = _unpack(payload)
    async with import_lock:
        return await run_in_threadpool(preview, req.items, registry.get(), req.default_level)


@router.get("/imports")
async def list_imports(
    limit: int = Query(default=20, ge=1, le=200),
    user: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    rows = db.query(ImportRun).order_by(ImportRun.created_at.desc(), ImportRun.id.desc()).limit(limit).all()
    return [
        {
            "id": r.id,
            "created_at": r.created_at.isoformat(),
            "username": r.username,
            "mode": r.mode,
            "defaultLevel": r.default_level,
            "items": r.item_count,
            "skipped": r.skipped_count,
            "added": r.added_total,
            "summary": json.loads(r.summary_json or "[]"),
        }
        for r in rows
    ]


@router.get("/wordlists")
async def wordlist_counts(user: User = Depends(get_current_admin), wordlists: CefrWordlists = Depends(get_wordlists)):
    return {"counts": wordlists.counts(), "total": len(wordlists.canonical)}


@router.post("/wordlists/reload")
async def reload_wordlists(user: User = Depends(get_current_admin), registry: WordlistRegistry = Depends(get_registry)):
    async with import_lock:
        wordlists = await run_in_threadpool(registry.reload)
    return {"ok": True, "counts": wordlists.counts(), "total": len(wordlists.canonical)}


@router.get("/coverage")
async def coverage(
    user: User = Depends(get_current_admin),
    store: PartitionStore = Depends(get_store),
    wordlists: CefrWordlists = Depends(get_wordlists),
):
    return await run_in_threadpool(coverage_report, wordlists, store)


@router.post("/catalog/lookup")
async def catalog_lookup(
    req: LookupRequest,
    user: User = Depends(get_current_admin),
    store: PartitionStore = Depends(get_store),
) -> Dict[str, Any]:
    return await run_in_threadpool(find_exercises_for_words, store, req.words)
