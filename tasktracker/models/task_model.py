from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from tasktracker.models.comment_model import Comment
from tasktracker.models.refs import UnresolvedRef, UserRef
from tasktracker.models.subtask_model import Subtask
from tasktracker.utils.dates import isoformat, utcnow
from tasktracker.utils.db import id_str, to_object_id, to_object_ids

PRIORITIES = ("High", "Medium", "Low")
STATUSES = ("To Do", "In Progress", "Done")
RECURRENCE_PATTERNS = ("daily", "weekly", "monthly")

DEFAULT_PRIORITY = "Medium"
DEFAULT_STATUS = "To Do"


@dataclass
class Attachment:
    url: str
    public_id: str
    filename: str
    # Needed by the storage backend to address the file on delete
    resource_type: str = "image"

    @classmethod
    def from_doc(cls, doc):
        return cls(
            url=doc.get("url", ""),
            public_id=doc.get("public_id", ""),
            filename=doc.get("filename", ""),
            resource_type=doc.get("resource_type") or "image",
        )

    def to_doc(self):
        return {
            "url": self.url,
            "public_id": self.public_id,
            "filename": self.filename,
            "resource_type": self.resource_type,
        }


@dataclass
class Task:
    title: str
    due_date: datetime
    created_by_user: UserRef
    description: Optional[str] = None
    priority: str = DEFAULT_PRIORITY  # High | Medium | Low
    status: str = DEFAULT_STATUS  # To Do | In Progress | Done
    attachments: List[Attachment] = field(default_factory=list)
    assigned_to_users: List[UserRef] = field(default_factory=list)
    is_recurring: bool = False
    recurrence_pattern: str = ""  # daily | weekly | monthly, "" when not recurring
    next_occurrence: Optional[datetime] = None
    sub_tasks: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[str] = None
    # Loaded children; only set on detail reads, orphan ids already dropped
    subtask_records: Optional[List[Subtask]] = None
    comment_records: Optional[List[Comment]] = None

    @classmethod
    def from_doc(cls, doc):
        return cls(
            title=doc.get("title", ""),
            description=doc.get("description"),
            due_date=doc.get("due_date"),
            priority=doc.get("priority") or DEFAULT_PRIORITY,
            status=doc.get("status") or DEFAULT_STATUS,
            attachments=[Attachment.from_doc(a) for a in doc.get("attachments") or []],
            created_by_user=UnresolvedRef(id_str(doc.get("created_by_user"))),
            assigned_to_users=[UnresolvedRef(id_str(u)) for u in doc.get("assigned_to_users") or []],
            is_recurring=bool(doc.get("is_recurring", False)),
            recurrence_pattern=doc.get("recurrence_pattern") or "",
            next_occurrence=doc.get("next_occurrence"),
            sub_tasks=[id_str(s) for s in doc.get("sub_tasks") or []],
            comments=[id_str(c) for c in doc.get("comments") or []],
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            id=id_str(doc.get("_id")),
        )

    def to_doc(self):
        return {
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date,
            "priority": self.priority,
            "status": self.status,
            "attachments": [a.to_doc() for a in self.attachments],
            "created_by_user": to_object_id(self.creator_id),
            "assigned_to_users": to_object_ids(self.assignee_ids),
            "is_recurring": self.is_recurring,
            "recurrence_pattern": self.recurrence_pattern,
            "next_occurrence": self.next_occurrence,
            "sub_tasks": to_object_ids(self.sub_tasks),
            "comments": to_object_ids(self.comments),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @property
    def creator_id(self) -> str:
        return self.created_by_user.id

    @property
    def assignee_ids(self) -> List[str]:
        return [ref.id for ref in self.assigned_to_users]

    def is_creator(self, user_id) -> bool:
        return self.creator_id == str(user_id)

    def is_assignee(self, user_id) -> bool:
        return str(user_id) in self.assignee_ids

    def find_attachment(self, public_id) -> Optional[Attachment]:
        for attachment in self.attachments:
            if attachment.public_id == public_id:
                return attachment
        return None

    def to_json(self):
        if self.subtask_records is not None:
            sub_tasks = [s.to_json() for s in self.subtask_records]
        else:
            sub_tasks = list(self.sub_tasks)
        if self.comment_records is not None:
            comments = [c.to_json() for c in self.comment_records]
        else:
            comments = list(self.comments)
        return {
            "_id": self.id,
            "title": self.title,
            "description": self.description,
            "due_date": isoformat(self.due_date),
            "priority": self.priority,
            "status": self.status,
            "attachments": [a.to_doc() for a in self.attachments],
            "created_by_user": self.created_by_user.to_json(),
            "assigned_to_users": [ref.to_json() for ref in self.assigned_to_users],
            "is_recurring": self.is_recurring,
            "recurrence_pattern": self.recurrence_pattern,
            "next_occurrence": isoformat(self.next_occurrence),
            "sub_tasks": sub_tasks,
            "comments": comments,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


def dedupe_ids(ids):
    """Drop repeated ids, keeping first-seen order."""
    seen = set()
    unique = []
    for value in ids or []:
        key = str(value)
        if key not in seen:
            seen.add(key)
            unique.append(key)
    return unique
