import os

from flask import Flask, current_app, send_from_directory
from flask_cors import CORS

from models import db
from auth.routes import auth_bp
from auth.session import current_user, jwt, optional_session
from errors import register_error_handlers, success
from savings_goals.routes import savings_goals_bp
from storage.object_store import init_storage
from timeutils import isoformat, utcnow
from transactions.routes import transactions_bp
from users.routes import users_bp
from config import Config

API_PREFIX = "/api"


def create_app(config_class=Config, **overrides):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config.update(overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    CORS(app, resources={f"{API_PREFIX}/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    db.init_app(app)
    with app.app_context():
        db.create_all()
    jwt.init_app(app)

    # relative upload folders live beside the app, whatever the working directory
    app.config["UPLOAD_FOLDER"] = os.path.normpath(
        os.path.join(app.root_path, app.config["UPLOAD_FOLDER"])
    )
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)
    init_storage(app)

    for bp in (auth_bp, transactions_bp, savings_goals_bp, users_bp):
        app.register_blueprint(bp, url_prefix=f"{API_PREFIX}{bp.url_prefix}")

    register_error_handlers(app)
    register_core_routes(app)

    return app


def register_core_routes(app: Flask) -> None:

    @app.route(f"{API_PREFIX}/health", methods=["GET"])
    @optional_session
    def health():
        return success(
            {"authenticated": current_user() is not None, "timestamp": isoformat(utcnow())},
            "Money Tracker API is running",
        )

    @app.route(f"{app.config['PUBLIC_UPLOAD_URL']}/<path:filename>", methods=["GET"])
    def uploaded_file(filename):
        return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)


if __name__ == "__main__":
    create_app().run(debug=True)
