import logging
import uuid

from flask import Flask, g, render_template, request
from dotenv import load_dotenv

from app.formstate.config import load_config
from app.formstate.routes import bp as routes_bp
from app.formstate.modules.users.routes import bp as users_bp


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates")
    app.config.from_mapping(load_config())
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    @app.before_request
    def _assign_request_id():
        if not getattr(g, "request_id", None):
            g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex

    app.register_blueprint(routes_bp)
    app.register_blueprint(users_bp)

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    @app.errorhandler(413)
    def _err_413(e):  # type: ignore[no-redef]
        app.logger.warning("Rejected oversized form post (request_id=%s)", getattr(g, "request_id", None))
        return render_template("errors/400.html", message="Form submission too large."), 413

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        # Ensure stack trace shows in logs.
        rid = getattr(g, "request_id", None)
        app.logger.exception("Unhandled 500 (request_id=%s)", rid)
        return render_template("errors/500.html", request_id=rid), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
