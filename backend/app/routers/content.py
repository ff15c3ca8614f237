from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_store
from ..errors import ReferenceDataUnavailable
from ..items import resolve_module
from ..settings import settings
from ..storage import PartitionStore

router = APIRouter(prefix="/api", tags=["content"])


@router.get("/{category}/levels/{level}")
def get_level(category: str, level: int, store: PartitionStore = Depends(get_store)):
	module = resolve_module(category)
	if module is None:
		raise HTTPException(status_code=404, detail=f"unknown category {category}")
	if not 1 <= level <= settings.max_level:
		raise HTTPException(status_code=404, detail=f"level must be between 1 and {settings.max_level}")
	try:
		return store.load(module, level)
	except ReferenceDataUnavailable as exc:
		raise HTTPException(status_code=404, detail=str(exc))
