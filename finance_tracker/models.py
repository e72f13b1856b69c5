# finance_tracker/models.py
# lightweight value classes (records themselves stay plain dicts, as the API returns them)
from dataclasses import dataclass

PLACEHOLDER_TOKEN = "placeholder-token"


@dataclass(frozen=True)
class Identity:
    """The logged-in user. ``token`` is a fixed placeholder, not a credential."""

    id: str
    username: str
    token: str = PLACEHOLDER_TOKEN

    @classmethod
    def from_account(cls, account):
        """Build an identity from a ``users`` row returned by the API"""
        return cls(id=str(account["id"]), username=account["username"])

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ValueError("identity record must be an object")
        values = {}
        for key in ("id", "username", "token"):
            value = data.get(key)
            if value is None or value == "":
                raise ValueError(f"identity record is missing {key!r}")
            values[key] = str(value)
        return cls(**values)

    def to_dict(self):
        return {"id": self.id, "username": self.username, "token": self.token}
