from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tasktracker.utils.dates import isoformat, utcnow
from tasktracker.utils.db import id_str


@dataclass
class Notification:
    message: str
    recipient: str
    is_read: bool = False
    task_id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    id: Optional[str] = None
    # Filled in by listings; None when the task is gone or was not looked up
    task_title: Optional[str] = None

    @classmethod
    def from_doc(cls, doc):
        return cls(
            message=doc.get("message", ""),
            recipient=id_str(doc.get("recipient")),
            is_read=bool(doc.get("is_read", False)),
            task_id=id_str(doc.get("task_id")),
            created_at=doc.get("created_at"),
            id=id_str(doc.get("_id")),
        )

    def to_json(self):
        return {
            "_id": self.id,
            "message": self.message,
            "recipient": self.recipient,
            "is_read": self.is_read,
            "task_id": self.task_id,
            "task_title": self.task_title,
            "created_at": isoformat(self.created_at),
        }
