# shop/utils/debug_routes.py
from flask import current_app, jsonify

from ..services import get_services


def register_debug_routes(app):
    """
    Habilita endpoints de debug quando DEBUG_ROUTES=1.
    Não ligar em produção.
    """
    if not app.config.get("DEBUG_ROUTES"):
        return

    @app.get("/api/_routes")
    def _routes():
        routes = sorted(
            (
                {
                    "rule": rule.rule,
                    "endpoint": rule.endpoint,
                    "methods": sorted(rule.methods - {"HEAD", "OPTIONS"}),
                }
                for rule in current_app.url_map.iter_rules()
                if rule.endpoint != "static"
            ),
            key=lambda r: r["rule"],
        )
        return jsonify({"total": len(routes), "routes": routes})

    @app.get("/api/_store")
    def _store():
        services = get_services()
        return jsonify({
            "status": "ok",
            "blueprints": sorted(current_app.blueprints.keys()),
            "store": services.store.info(),
            "sessions": len(services.auth.sessions),
        })
