from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text
from .db import Base


class ImportRun(Base):
	__tablename__ = "import_runs"
	id = Column(Integer, primary_key=True, autoincrement=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
	# Admin who submitted the batch; "anonymous" while admin auth is off
	username = Column(String(128), nullable=False, default="anonymous")
	mode = Column(String(16), nullable=False)
	default_level = Column(Integer, nullable=False)
	item_count = Column(Integer, default=0, nullable=False)
	skipped_count = Column(Integer, default=0, nullable=False)
	added_total = Column(Integer, default=0, nullable=False)
	summary_json = Column(Text, nullable=True)  # JSON list of {file, added, total}


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	# JWT id (jti); deleting the row revokes the token
	session_id = Column(String(64), primary_key=True)
	username = Column(String(128), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)
