from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tasktracker.models.refs import UserSummary
from tasktracker.utils.dates import isoformat, utcnow
from tasktracker.utils.db import id_str


@dataclass
class User:
    name: str
    email: str
    # Only ever a werkzeug hash; never serialized
    password_hash: str = field(default="", repr=False)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc):
        return cls(
            name=doc.get("name", ""),
            email=doc.get("email", ""),
            password_hash=doc.get("password", ""),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            id=id_str(doc.get("_id")),
        )

    def to_doc(self):
        return {
            "name": self.name,
            "email": self.email,
            "password": self.password_hash,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def summary(self) -> UserSummary:
        return UserSummary(id=self.id, name=self.name, email=self.email)

    def to_json(self):
        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of a request, handed to views and services."""

    user_id: str
    name: str
    email: str
    token_jti: Optional[str] = None

    @classmethod
    def for_user(cls, user: User, token_jti=None):
        return cls(user_id=user.id, name=user.name, email=user.email, token_jti=token_jti)
