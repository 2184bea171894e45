from datetime import timedelta

from tasktracker.errors import StorageError
from tasktracker.models.task_model import Attachment
from tasktracker.utils.dates import utcnow


class FakeStorage:
    """In-memory file storage recording uploads and deletes.

    Public ids listed in ``fail_on`` make ``delete`` raise like a storage outage.
    """

    def __init__(self):
        self.uploaded = []
        self.deleted = []
        self.fail_on = set()

    def upload(self, buffer, filename, folder):
        public_id = f"{folder}/{len(self.uploaded)}-{filename}"
        self.uploaded.append((public_id, buffer))
        return Attachment(
            url=f"https://files.example.com/{public_id}",
            public_id=public_id,
            filename=filename,
            resource_type="raw",
        )

    def delete(self, public_id, resource_type="image"):
        if public_id in self.fail_on:
            raise StorageError(f"Could not delete file {public_id}")
        self.deleted.append(public_id)
        return {"result": "ok"}


def future(days=10):
    """ISO timestamp ``days`` from now, whole seconds."""
    return (utcnow() + timedelta(days=days)).replace(microsecond=0).isoformat()
