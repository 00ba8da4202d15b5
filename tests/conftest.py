import pytest
import json
import os
import sys

# Ensure project root is in sys.path so config can be imported
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.abspath(os.path.join(current_dir, os.pardir))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import config

TEST_KEY = "0123456789ABCDEF0123456789ABCDEF0123456789ABCDEF0123456789ABCDEF"


@pytest.fixture
def secret_key():
    return TEST_KEY


@pytest.fixture
def write_json(tmp_path):
    def _write(doc, name="parent_db.json"):
        path = tmp_path / name
        path.write_text(json.dumps(doc), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def dest_path(tmp_path):
    return tmp_path / "db.json"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # Never let a developer's shell key leak into tests
    monkeypatch.delenv(config.SECRET_KEY_ENV, raising=False)
