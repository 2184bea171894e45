from flask import Flask, jsonify, request
from flask_cors import CORS
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

from tasktracker.auth import init_jwt
from tasktracker.errors import ApiError
from tasktracker.logging_setup import configure_logging
from tasktracker.services.storage import CloudinaryStorage
from tasktracker.utils.db import ensure_indexes, get_db, init_app as init_db


def create_app(config_object="tasktracker.config.Config", mongo_client=None, storage=None):
    """Application factory.

    ``mongo_client`` and ``storage`` replace the MongoDB client and the file
    storage backend; the test suite passes mongomock and an in-memory fake.
    """
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.json.sort_keys = False
    configure_logging(app)

    # Core extensions
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})
    init_jwt(app)
    init_db(app, mongo_client)

    if storage is None:
        storage = CloudinaryStorage.from_config(app.config)
        if not storage.configured:
            app.logger.warning(
                "File storage is not configured; CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY "
                "or CLOUDINARY_API_SECRET missing. Attachment uploads will fail."
            )
    app.extensions["file_storage"] = storage

    with app.app_context():
        try:
            ensure_indexes(get_db())
        except PyMongoError as exc:
            app.logger.warning("Could not ensure MongoDB indexes: %s", exc)

    # Register blueprints
    from tasktracker.routes.comment_routes import comments_bp
    from tasktracker.routes.notification_routes import notifications_bp
    from tasktracker.routes.subtask_routes import subtasks_bp
    from tasktracker.routes.task_routes import tasks_bp
    from tasktracker.routes.user_routes import users_bp

    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(tasks_bp, url_prefix="/api/tasks")
    app.register_blueprint(subtasks_bp, url_prefix="/api/subtasks")
    app.register_blueprint(comments_bp, url_prefix="/api/comments")
    app.register_blueprint(notifications_bp, url_prefix="/api/notifications")

    @app.before_request
    def log_request():
        app.logger.debug("%s %s", request.method, request.path)

    @app.get("/api/health")
    def health():
        return jsonify(success=True, status="ok", service="Task Tracker API"), 200

    @app.errorhandler(ApiError)
    def api_error(exc):
        if exc.status_code >= 500:
            app.logger.error("%s %s failed: %s", request.method, request.path, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def http_error(exc):
        return jsonify(success=False, message=exc.description or exc.name), exc.code

    @app.errorhandler(Exception)
    def server_error(exc):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(success=False, message="Internal Server Error"), 500

    return app
