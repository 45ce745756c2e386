import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, jsonify
from flask_cors import CORS
from src.config import Config
from src.extensions import db, migrate
from src.log import get_logger, set_level
from settings.settings_cache import settings_cache

# register blueprints dynamically
from routes import register_routes


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.url_map.strict_slashes = False

    set_level(app.config.get("LOG_LEVEL", "INFO"))
    logger = get_logger("app")

    # Enable CORS for all routes
    CORS(app, origins=app.config["CORS_ORIGINS"], methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
         allow_headers=["Content-Type", "Authorization"], supports_credentials=True)

    # initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    settings_cache.init_app(app)

    # Import all models within app context to resolve relationships
    with app.app_context():
        import models  # noqa: F401

    # register routes/blueprints
    register_routes(app)

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"error": "Uploaded file is too large"}), 413

    @app.get("/")
    def index():
        return jsonify({"message": "Point of Sale API"}), 200

    logger.info("Application created with %s", config_class.__name__)
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=app.config["DEBUG"])
