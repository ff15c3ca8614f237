from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import secrets
import uuid

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from ..settings import settings
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import AuthSession

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)

ANONYMOUS = "anonymous"


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class User(BaseModel):
	username: str


# (username, plain password) -> hash; rebuilt whenever the configured admin changes
_admin_hash: dict = {}


def _configured_admin_hash() -> Optional[str]:
	username = settings.admin_username
	password = settings.admin_password
	if not (username and password):
		return None
	cache_key = (username, password)
	if cache_key not in _admin_hash:
		_admin_hash.clear()
		_admin_hash[cache_key] = pwd_context.hash(password)
	return _admin_hash[cache_key]


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(plain_password, hashed_password)


def authenticate_admin(username: str, password: str) -> Optional[User]:
	hashed = _configured_admin_hash()
	if hashed is None:
		return None
	if not secrets.compare_digest(username, settings.admin_username or ""):
		return None
	if not verify_password(password, hashed):
		return None
	return User(username=username)


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = settings.access_token_expire_minutes
		delta = timedelta(minutes=minutes) if minutes > 0 else timedelta(days=30)
	return datetime.now(timezone.utc) + delta


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	to_encode.update({"exp": _resolve_expiry(expires_delta)})
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
	if not settings.admin_auth_enabled:
		raise HTTPException(status_code=404, detail="admin authentication is not configured")
	user = authenticate_admin(form_data.username, form_data.password)
	if not user:
		logger.warning("Rejected admin login for %r", form_data.username)
		raise HTTPException(status_code=401, detail="Incorrect username or password")
	session_id = uuid.uuid4().hex
	access_token = create_access_token({"sub": user.username, "jti": session_id})
	db.add(AuthSession(session_id=session_id, username=user.username))
	db.commit()
	return Token(access_token=access_token)


def _decode(token: str) -> tuple:
	payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	username = payload.get("sub")
	jti = payload.get("jti")
	if username is None or jti is None:
		raise JWTError("token is missing sub or jti")
	return username, jti


def get_current_admin(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
	if not settings.admin_auth_enabled:
		return User(username=ANONYMOUS)
	credentials_exception = HTTPException(
		status_code=401,
		detail="Could not validate credentials",
		headers={"WWW-Authenticate": "Bearer"},
	)
	if not token:
		raise credentials_exception
	try:
		username, jti = _decode(token)
	except JWTError:
		raise credentials_exception
	# The session row must still exist; logout deletes it.
	row = db.get(AuthSession, jti)
	if not row or row.username != username:
		raise credentials_exception
	row.last_activity_at = datetime.utcnow()
	db.add(row)
	db.commit()
	return User(username=username)


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_admin)):
	return user


@router.post("/logout")
async def logout(token: Optional[str] = Depends(oauth2_scheme), user: User = Depends(get_current_admin), db: Session = Depends(get_db)):
	if not token or not settings.admin_auth_enabled:
		return {"ok": True}
	_, jti = _decode(token)
	row = db.get(AuthSession, jti)
	if row is not None:
		db.delete(row)
		db.commit()
	return {"ok": True}
