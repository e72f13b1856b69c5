# finance_tracker/auth.py
"""Login / signup / logout state machine.

The machine owns the current identity and the session store. Pages never
touch either directly; they read ``identity`` / ``owner_id`` from the
machine instance they were handed.

Passwords are compared as plain strings against the account row returned by
the API. That is the contract of the hosted backend, not a security model.
"""

import logging
from enum import Enum

from .errors import ActionInProgressError, ApiError
from .models import Identity

logger = logging.getLogger("finance-tracker.auth")

INCORRECT_CREDENTIALS = "Username or password is incorrect"
LOGIN_FALLBACK = "Login failed. Please check your credentials."
SESSION_SAVE_FAILED = "Could not save your session. Please try again."

DASHBOARD_VIEW = "dashboard"
LOGIN_VIEW = "login"


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING_LOGIN = "authenticating_login"
    AUTHENTICATING_SIGNUP = "authenticating_signup"
    AUTHENTICATED = "authenticated"


_IN_FLIGHT = (AuthState.AUTHENTICATING_LOGIN, AuthState.AUTHENTICATING_SIGNUP)


class AuthStateMachine:
    def __init__(self, client, store, navigate=None):
        """
        Args:
            client: DataApiClient used for account lookup and creation
            store: SessionStore holding the persisted identity
            navigate: optional callable taking a view name ("dashboard" / "login")
        """
        self.client = client
        self.store = store
        self._navigate = navigate
        self.identity = None
        self.state = AuthState.UNAUTHENTICATED
        self.last_error = None
        self._restoring = True
        self._restore()

    # ---------------- Properties ----------------
    @property
    def loading(self):
        return self._restoring or self.state in _IN_FLIGHT

    @property
    def is_authenticated(self):
        return self.state is AuthState.AUTHENTICATED

    @property
    def owner_id(self):
        """Id used to scope every record request, or None when logged out"""
        return self.identity.id if self.identity else None

    # ---------------- Transitions ----------------
    def _restore(self):
        try:
            identity = self.store.load()
        finally:
            self._restoring = False
        if identity is not None:
            self.identity = identity
            self.state = AuthState.AUTHENTICATED
            logger.info(f"Restored session for {identity.username}")

    def login(self, username, password):
        """Look the user up and compare passwords. Returns True on success."""
        self._ensure_idle("login")
        return self._login(username, password)

    def signup(self, username, password):
        """Create the account, then log straight in with the same credentials"""
        self._ensure_idle("signup")
        prior_state, prior_identity = self.state, self.identity

        self.last_error = None
        self.state = AuthState.AUTHENTICATING_SIGNUP
        try:
            self.client.create_user(username, password)
        except ApiError as e:
            logger.error(f"Signup failed for {username}: {e.message}")
            self.state = prior_state
            self.identity = prior_identity
            self.last_error = e.message
            return False

        logger.info(f"Created account {username}")
        return self._login(username, password)

    def logout(self):
        """Drop the identity and persisted session. Safe to call in any state."""
        self._clear_store()
        if self.identity is not None:
            logger.info(f"User {self.identity.username} logged out")
        self.identity = None
        self.state = AuthState.UNAUTHENTICATED
        self._signal(LOGIN_VIEW)

    # ---------------- Internals ----------------
    def _ensure_idle(self, action):
        if self.state in _IN_FLIGHT:
            raise ActionInProgressError(("auth", action))

    def _login(self, username, password):
        self.last_error = None
        self.state = AuthState.AUTHENTICATING_LOGIN

        try:
            users = self.client.find_users(username)
        except ApiError as e:
            return self._fail_login(username, e.message)

        # usernames are unique, so only the first row matters
        account = users[0] if users else None
        if not isinstance(account, dict) or account.get("password") != password:
            return self._fail_login(username, INCORRECT_CREDENTIALS)

        try:
            identity = Identity.from_account(account)
        except (KeyError, TypeError):
            return self._fail_login(username, LOGIN_FALLBACK)

        try:
            self.store.save(identity)
        except OSError as e:
            logger.error(f"Could not persist session for {username}: {e}")
            return self._fail_login(username, SESSION_SAVE_FAILED)

        self.identity = identity
        self.state = AuthState.AUTHENTICATED
        logger.info(f"User {identity.username} logged in")
        self._signal(DASHBOARD_VIEW)
        return True

    def _fail_login(self, username, message):
        logger.warning(f"Login failed for {username}: {message}")
        self.identity = None
        self._clear_store()
        self.state = AuthState.UNAUTHENTICATED
        self.last_error = message
        return False

    def _clear_store(self):
        try:
            self.store.clear()
        except OSError as e:
            logger.error(f"Could not remove persisted session: {e}")

    def _signal(self, view):
        if self._navigate is not None:
            self._navigate(view)
