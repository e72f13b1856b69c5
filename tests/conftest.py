"""
Shared fixtures for the finance tracker tests.

The data API is never contacted: ``session`` is a MagicMock standing in for
requests.Session, and ``reply`` queues canned responses on it.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from finance_tracker.api_client import DataApiClient
from finance_tracker.auth import AuthStateMachine
from finance_tracker.models import Identity
from finance_tracker.session_store import SessionStore, new_client_key

API_BASE = "https://api.test/rest"


class FakeResponse:
    def __init__(self, payload=None, status_code=200, body_is_json=True):
        self._payload = payload if payload is not None else {}
        self.status_code = status_code
        self._body_is_json = body_is_json

    def json(self):
        if not self._body_is_json:
            raise ValueError("No JSON object could be decoded")
        return self._payload


def reply(session, *responses):
    """Queue responses (FakeResponse, payload dicts, or exceptions) on the mock session"""
    queued = []
    for r in responses:
        queued.append(FakeResponse(r) if isinstance(r, dict) else r)
    session.request.side_effect = queued


def sent(session):
    """(method, path, params, json) for every request made so far"""
    out = []
    for call in session.request.call_args_list:
        method, url = call.args
        out.append((method, url[len(API_BASE):], call.kwargs.get("params"), call.kwargs.get("json")))
    return out


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return DataApiClient(API_BASE, "test-secret", timeout=5, session=session)


@pytest.fixture
def store(tmp_path):
    return SessionStore(new_client_key(), str(tmp_path / "sessions"))


@pytest.fixture
def navigations():
    return []


@pytest.fixture
def auth(client, store, navigations):
    return AuthStateMachine(client, store, navigate=navigations.append)


@pytest.fixture
def logged_in(client, store, navigations):
    store.save(Identity(id="u1", username="alice"))
    return AuthStateMachine(client, store, navigate=navigations.append)
