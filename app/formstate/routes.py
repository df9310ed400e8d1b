from flask import Blueprint, render_template

from app.formstate.modules.users.service import SAMPLE_USERS

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    return render_template("public/index.html", users=SAMPLE_USERS)


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """Plain-text liveness check for gunicorn deployments."""
    return "ok", 200
