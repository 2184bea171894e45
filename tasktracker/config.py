import os
from datetime import timedelta

from dotenv import load_dotenv

# Load .env from the working directory so local development settings are picked up
load_dotenv()


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "change-this-jwt-secret")
    # Session tokens are also removed from the token store after 7 days (TTL index)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=int(os.environ.get("JWT_EXPIRES_DAYS", "7")))

    MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017/?directConnection=true")
    MONGO_DB_NAME = os.environ.get("MONGO_DB_NAME", "tasktracker")
    MONGO_TIMEOUT_MS = int(os.environ.get("MONGO_TIMEOUT_MS", "2000"))

    CLOUDINARY_CLOUD_NAME = os.environ.get("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY = os.environ.get("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET = os.environ.get("CLOUDINARY_API_SECRET")
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "task-tracker")

    MAX_ATTACHMENT_BYTES = 5 * 1024 * 1024
    # Leave headroom over the attachment limit for the multipart envelope
    MAX_CONTENT_LENGTH = 6 * 1024 * 1024
    ALLOWED_ATTACHMENT_TYPES = (
        "image/jpeg",
        "image/jpg",
        "image/png",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    )

    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"


class TestConfig(Config):
    TESTING = True
    DEBUG = False
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-that-is-long-enough-for-hs256"
    MONGO_DB_NAME = "tasktracker_test"
    CLOUDINARY_CLOUD_NAME = None
    LOG_LEVEL = "WARNING"
