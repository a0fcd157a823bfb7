"""Request and response shapes for the Waitly API."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, TypedDict, Union

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


def normalize_email(value: str) -> str:
    return value.strip().lower()


class EntryResponse(TypedDict):
    id: str
    email: str


@dataclass
class WaitlyEntry:
    """A registrant to submit to a waitlist."""

    email: str
    referred_by_code: Optional[str] = None
    utm: Optional[Dict[str, str]] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def from_value(cls, value: Union["WaitlyEntry", Mapping[str, Any]]) -> "WaitlyEntry":
        """Accept an entry or a mapping keyed by wire or Python names."""
        if isinstance(value, cls):
            return value
        return cls(
            email=value.get("email"),
            referred_by_code=value.get("referred_by_code", value.get("referredByCode")),
            utm=value.get("utm"),
            metadata=value.get("metadata"),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Wire body for POST /entries. Unset optional fields are omitted."""
        payload: Dict[str, Any] = {"email": normalize_email(self.email)}
        if self.referred_by_code is not None:
            payload["referredByCode"] = self.referred_by_code
        if self.utm is not None:
            payload["utm"] = dict(self.utm)
        if self.metadata is not None:
            payload["metadata"] = dict(self.metadata)
        return payload
