"""References from a record to a user.

A reference is either an ``UnresolvedRef`` (only the id is known) or a
``ResolvedRef`` (the user was loaded alongside the record). Which one a record
carries is decided by the repository that loaded it, so serializers never
have to guess whether they hold an id or a user.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class UserSummary:
    id: str
    name: str
    email: str

    def to_json(self):
        return {"_id": self.id, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class UnresolvedRef:
    id: str

    def to_json(self):
        return self.id


@dataclass(frozen=True)
class ResolvedRef:
    user: UserSummary

    @property
    def id(self) -> str:
        return self.user.id

    def to_json(self):
        return self.user.to_json()


UserRef = Union[UnresolvedRef, ResolvedRef]


def resolve(ref: UserRef, summaries) -> UserRef:
    """Swap in a ResolvedRef when ``summaries`` holds the user; keep the id otherwise."""
    summary = summaries.get(ref.id)
    if summary is None:
        return UnresolvedRef(ref.id)
    return ResolvedRef(summary)
