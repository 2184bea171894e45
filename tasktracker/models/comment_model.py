from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tasktracker.models.refs import UnresolvedRef, UserRef
from tasktracker.utils.dates import isoformat, utcnow
from tasktracker.utils.db import id_str

MAX_COMMENT_LENGTH = 500


@dataclass
class Comment:
    content: str
    author: UserRef
    task_id: str  # owning task id, fixed at creation
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc):
        return cls(
            content=doc.get("content", ""),
            author=UnresolvedRef(id_str(doc.get("author"))),
            task_id=id_str(doc.get("task_id")),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            id=id_str(doc.get("_id")),
        )

    @property
    def author_id(self) -> str:
        return self.author.id

    def to_json(self):
        return {
            "_id": self.id,
            "content": self.content,
            "author": self.author.to_json(),
            "task_id": self.task_id,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
