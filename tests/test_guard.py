"""
Tests for the in-flight action guard — finance_tracker/guard.py
"""

import pytest

from finance_tracker.errors import ActionInProgressError, ValidationError
from finance_tracker.guard import ActionGuard


class TestActionGuard:
    def test_claim_and_release(self):
        guard = ActionGuard()
        with guard.claim(("income", "add")):
            assert guard.is_active(("income", "add"))
            assert guard.busy
        assert not guard.busy

    def test_same_key_rejected(self):
        guard = ActionGuard()
        with guard.claim(("income", "add")):
            with pytest.raises(ActionInProgressError) as exc:
                with guard.claim(("income", "add")):
                    pass
        assert exc.value.key == ("income", "add")
        assert isinstance(exc.value, ValidationError)

    def test_released_on_error(self):
        guard = ActionGuard()
        with pytest.raises(RuntimeError):
            with guard.claim(("expense", "delete")):
                raise RuntimeError("boom")
        assert not guard.is_active(("expense", "delete"))

    def test_other_keys_allowed(self):
        guard = ActionGuard()
        with guard.claim(("income", "add")):
            with guard.claim(("expense", "add")):
                assert guard.is_active(("expense", "add"))
