from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tasktracker.utils.dates import isoformat, utcnow
from tasktracker.utils.db import id_str


@dataclass
class Subtask:
    title: str
    task: str  # owning task id, fixed at creation
    is_completed: bool = False
    due_date: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc):
        return cls(
            title=doc.get("title", ""),
            task=id_str(doc.get("task")),
            is_completed=bool(doc.get("is_completed", False)),
            due_date=doc.get("due_date"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            id=id_str(doc.get("_id")),
        )

    def to_json(self):
        return {
            "_id": self.id,
            "title": self.title,
            "is_completed": self.is_completed,
            "due_date": isoformat(self.due_date),
            "task": self.task,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
