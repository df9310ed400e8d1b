from __future__ import annotations

from flask import Blueprint, current_app, flash, g, jsonify, redirect, render_template, request, url_for

from app.formstate.forms import FormMetadata
from app.formstate.modules.users.schemas import ClientUserForm, UserForm
from app.formstate.modules.users.service import find_by_id, next_user_id
from app.formstate.submission import parse_submission

bp = Blueprint("users", __name__)


def _wants_json() -> bool:
    best = request.accept_mimetypes.best_match(["text/html", "application/json"])
    return best == "application/json"


def _render_form(user_id: str, default_value: dict, last_result: dict | None = None, status: int = 200):
    # Keying the form by id resets its state when navigating between records.
    form = FormMetadata(f"user-{user_id}", default_value=default_value, last_result=last_result)
    current_app.logger.debug("form props: %s", form.props())
    return render_template("users/form.html", form=form, user_id=user_id), status


@bp.get("/<user_id>")
def user_get(user_id: str):
    record = find_by_id(user_id)
    if _wants_json():
        return jsonify(record)
    return _render_form(user_id, record)


@bp.post("/<user_id>")
def user_post(user_id: str):
    submission = parse_submission(request.form, UserForm, field_schema=ClientUserForm)
    rid = getattr(g, "request_id", None)

    if submission.status is None:
        # Insert/remove/validate: hand the updated entries back without accepting them.
        current_app.logger.debug("intent %s (request_id=%s)", submission.intent, rid)
        if _wants_json():
            return jsonify(submission.reply())
        return _render_form(user_id, find_by_id(user_id), submission.reply())

    if not submission.ok:
        reply = submission.reply()
        current_app.logger.info("error %s (request_id=%s)", reply["field_errors"], rid)
        if _wants_json():
            return jsonify({"error": reply, "data": None}), 400
        return _render_form(user_id, find_by_id(user_id), reply, status=400)

    current_app.logger.info("success user_id=%s (request_id=%s)", user_id, rid)
    if _wants_json():
        return jsonify({"data": submission.value, "error": None})

    next_id = next_user_id(user_id)
    if next_id is None:
        return render_template("users/success.html", user_id=user_id, data=submission.value)
    flash("Saved.", "success")
    return redirect(url_for("users.user_get", user_id=next_id), code=303)
