import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS

from . import __version__
from .blueprints import api_blueprint
from .config import load_config
from .errors import register_error_handlers
from .services import EXTENSION_KEY, build_services, get_services
from .storage import select_store
from .utils.debug_routes import register_debug_routes

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(config=None) -> Flask:
    settings = load_config(config)
    _configure_logging(settings["LOG_LEVEL"])

    app = Flask(__name__)
    app.config.update(settings)

    # CORS somente para o frontend em /api/*
    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
        supports_credentials=True,
    )

    # Backend escolhido uma única vez (banco ou memória)
    store = select_store(app)
    app.extensions[EXTENSION_KEY] = build_services(store)

    register_error_handlers(app)

    @app.get("/health")
    def health():
        return jsonify({
            "status": "OK",
            "message": "Vue Shop Backend is running",
            "framework": "Flask",
            "version": __version__,
            "store": get_services().store.name,
        }), 200

    app.register_blueprint(api_blueprint())
    register_debug_routes(app)

    logger.info(f"Vue Shop Backend pronto (backend: {store.name})")
    return app


if __name__ == "__main__":
    # execução local
    port = int(os.getenv("PORT", 5000))
    create_app().run(host="127.0.0.1", port=port, debug=True)
