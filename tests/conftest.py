import json
import os
import sys
import tempfile

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Settings and the SQLAlchemy engine are built at import time.
_TMP = tempfile.mkdtemp(prefix="content-import-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP, 'test.db')}")
os.environ.setdefault("DATA_DIR", os.path.join(_TMP, "data"))

from fastapi.testclient import TestClient

from backend.app.db import Base, engine
from backend.app.main import app
from backend.app.settings import settings
from backend.app.storage import InMemoryStore
from backend.app.wordlists import CefrWordlists


CEFR_LISTS = {
    "a1": ["cat", "dog", "run", "good", "morning", "house", "Cat", " "],
    "a2": ["run", "however", "finish", "fox", "ticket"],
    "b1": ["quick", "brown", "journey"],
    "b2": ["jumps", "nevertheless"],
}


@pytest.fixture
def wordlists():
    return CefrWordlists.from_raw(**CEFR_LISTS)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    cefr_dir = tmp_path / "wordlists" / "cefr"
    cefr_dir.mkdir(parents=True)
    for tier, words in CEFR_LISTS.items():
        (cefr_dir / f"{tier}.json").write_text(json.dumps(words), encoding="utf-8")
    monkeypatch.setattr(settings, "data_dir", tmp_path)
    monkeypatch.setattr(settings, "wordlist_dir", None)
    monkeypatch.setattr(settings, "admin_username", None)
    monkeypatch.setattr(settings, "admin_password", None)
    return tmp_path


@pytest.fixture
def client(data_dir):
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c


def read_partition(root, module, level):
    path = root / module / f"lvl{level}.json"
    return json.loads(path.read_text(encoding="utf-8"))
