# finance_tracker/session_store.py
import json
import logging
import os
import re
import uuid

from .config import DEFAULT_SESSION_DIR
from .models import Identity

logger = logging.getLogger("finance-tracker.session")

_CLIENT_KEY = re.compile(r"^[0-9a-f]{32}$")


def new_client_key():
    """Random key identifying one browser's session record"""
    return uuid.uuid4().hex


def is_client_key(value):
    return isinstance(value, str) and bool(_CLIENT_KEY.match(value))


class SessionStore:
    """Durable record holding one client's current identity as JSON.

    Each browser gets its own record, ``<directory>/<client_key>.json``, so
    logging in or out in one browser never touches another's session.
    """

    def __init__(self, client_key, directory=DEFAULT_SESSION_DIR):
        if not is_client_key(client_key):
            raise ValueError(f"Invalid session key {client_key!r}")
        self.client_key = client_key
        self.directory = directory

    @property
    def path(self):
        return os.path.join(self.directory, f"{self.client_key}.json")

    def load(self):
        '''Read the stored identity; any failure counts as "no session"'''
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Identity.from_dict(data)
        except (OSError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None

    def save(self, identity):
        '''Overwrite the stored identity'''
        os.makedirs(self.directory, exist_ok=True)
        tmp_path = self.path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(identity.to_dict(), f, indent=2)
        os.replace(tmp_path, self.path)

    def clear(self):
        '''Remove the stored identity if there is one'''
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
