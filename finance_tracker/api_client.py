# finance_tracker/api_client.py
"""HTTP client for the hosted data API.

Every request carries the shared admin secret header; the API has no per-user
authorization, so callers must always pass their own ``user_id``.
"""

import logging

import requests

from .config import ADMIN_SECRET_HEADER, DEFAULT_TIMEOUT
from .errors import ApiError

logger = logging.getLogger("finance-tracker.api")


# ---------------- Helpers ----------------
def safe_json(resp):
    """Decode a JSON object body, treating anything else as empty"""
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def error_message(payload, fallback):
    """Pick the server-provided message out of an error payload"""
    for key in ("message", "error"):
        msg = payload.get(key)
        if isinstance(msg, str) and msg.strip():
            return msg
    return fallback


# ---------------- Client ----------------
class DataApiClient:
    """Thin wrapper over a requests.Session bound to one API base URL."""

    def __init__(self, api_base, admin_secret, timeout=DEFAULT_TIMEOUT, session=None):
        self.api_base = api_base.rstrip("/")
        self.admin_secret = admin_secret
        self.timeout = timeout
        self._session = session

    @classmethod
    def from_settings(cls, settings, session=None):
        return cls(settings.api_base, settings.admin_secret, timeout=settings.timeout, session=session)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _headers(self):
        return {
            "Content-Type": "application/json",
            ADMIN_SECRET_HEADER: self.admin_secret,
        }

    def request(self, method, path, params=None, json=None, fallback="Request failed"):
        """Send one request and return the decoded payload.

        Raises:
            ApiError: on a transport failure (message is ``fallback``) or a
                non-2xx status (message taken from the payload if present).
        """
        method = method.upper()
        url = self.api_base + path
        logger.debug(f"{method} {path} params={params}")
        try:
            response = self.session.request(
                method, url, headers=self._headers(), params=params, json=json, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(fallback) from e

        payload = safe_json(response)
        if not 200 <= response.status_code < 300:
            message = error_message(payload, fallback)
            logger.error(f"{method} {path} returned {response.status_code}: {message}")
            raise ApiError(message, status_code=response.status_code, payload=payload)
        return payload

    def get(self, path, params=None, fallback="Request failed"):
        return self.request("GET", path, params=params, fallback=fallback)

    def post(self, path, body, fallback="Request failed"):
        return self.request("POST", path, json=body, fallback=fallback)

    def delete(self, path, params=None, fallback="Request failed"):
        return self.request("DELETE", path, params=params, fallback=fallback)

    # ---------------- Accounts ----------------
    def find_users(self, username):
        """Return the account rows matching ``username`` (possibly empty)"""
        payload = self.post(
            "/login", {"username": username}, fallback="Login failed. Please check your credentials."
        )
        return payload.get("users") or []

    def create_user(self, username, password):
        return self.post(
            "/createuser",
            {"username": username, "password": password},
            fallback="Signup failed. Please try again.",
        )

    # ---------------- Aggregates ----------------
    def total_income(self, owner_id):
        payload = self.get("/gettotalincome", {"user_id": owner_id}, fallback="Failed to fetch total income")
        return _aggregate_sum(payload, "income_aggregate", "income_amt")

    def total_expense(self, owner_id):
        payload = self.get("/gettotalexpense", {"user_id": owner_id}, fallback="Failed to fetch total expenses")
        return _aggregate_sum(payload, "expense_aggregate", "expense_amt")


def _aggregate_sum(payload, aggregate_key, field):
    # {"income_aggregate": {"aggregate": {"sum": {"income_amt": 123}}}}; sum is null with no rows
    node = payload.get(aggregate_key) or {}
    node = (node.get("aggregate") or {}).get("sum") or {}
    value = node.get(field)
    return float(value) if value is not None else 0.0
