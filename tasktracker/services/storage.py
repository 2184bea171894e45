"""Attachment storage backed by the Cloudinary upload API.

The app talks to storage through ``upload(buffer, filename, folder)`` and
``delete(public_id, resource_type)``; tests swap in a fake with the same two
methods via ``create_app(storage=...)``.
"""

import hashlib
import logging
import time

import requests
from flask import current_app

from tasktracker.errors import StorageError
from tasktracker.models.task_model import Attachment

logger = logging.getLogger(__name__)

API_BASE = "https://api.cloudinary.com/v1_1"


class CloudinaryStorage:
    def __init__(self, cloud_name, api_key, api_secret, timeout=30):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            config.get("CLOUDINARY_CLOUD_NAME"),
            config.get("CLOUDINARY_API_KEY"),
            config.get("CLOUDINARY_API_SECRET"),
        )

    @property
    def configured(self):
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def sign(self, params):
        # Cloudinary signs the sorted, non-empty parameters followed by the secret
        payload = "&".join(
            f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, "")
        )
        return hashlib.sha1(f"{payload}{self.api_secret}".encode("utf-8")).hexdigest()

    def _signed(self, params):
        params = dict(params, timestamp=int(time.time()))
        params["signature"] = self.sign(params)
        params["api_key"] = self.api_key
        return params

    def _post(self, path, data, files=None):
        if not self.configured:
            raise StorageError("File storage is not configured")
        url = f"{API_BASE}/{self.cloud_name}/{path}"
        try:
            resp = requests.post(url, data=data, files=files, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.exception("Storage request to %s failed: %s", path, exc)
            raise StorageError() from exc

    def upload(self, buffer, filename, folder):
        params = self._signed({"folder": folder, "filename_override": filename})
        result = self._post("auto/upload", params, files={"file": (filename, buffer)})
        return Attachment(
            url=result.get("secure_url") or result.get("url", ""),
            public_id=result["public_id"],
            filename=filename,
            resource_type=result.get("resource_type") or "image",
        )

    def delete(self, public_id, resource_type="image"):
        params = self._signed({"public_id": public_id})
        result = self._post(f"{resource_type}/destroy", params)
        if result.get("result") not in ("ok", "not found"):
            raise StorageError(f"Could not delete file {public_id}")
        return result


def get_storage():
    return current_app.extensions["file_storage"]
