from __future__ import annotations
from datetime import datetime, timedelta
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import ImportRun, AuthSession


def purge_old_import_runs(db: Session, days: int = 7) -> int:
	threshold = datetime.utcnow() - timedelta(days=days)
	removed = 0

	res = db.execute(delete(ImportRun).where(ImportRun.created_at < threshold))
	removed += res.rowcount or 0

	# Sessions idle for longer than the window are dead anyway
	res = db.execute(delete(AuthSession).where(AuthSession.last_activity_at < threshold))
	removed += res.rowcount or 0

	db.commit()
	return removed
