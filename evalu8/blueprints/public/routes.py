"""Candidate-facing endpoints. No login; the job token and application id are the credentials."""
from flask import jsonify
from . import bp
from .forms import IntakeForm, MessageForm
from ...services.lifecycle import get_lifecycle


@bp.get("/job/<job_token>")
def public_job(job_token):
    job = get_lifecycle().get_public_job(job_token)
    return jsonify(job.to_dict(public=True))


@bp.post("/applications")
def start_application():
    form = IntakeForm()
    if not form.validate_on_submit():
        return jsonify({"message": "Invalid request", "errors": form.errors}), 400
    app_row = get_lifecycle().start_application(form.job_token.data.strip(), form.candidate_fields())
    return jsonify(app_row.to_dict()), 201


@bp.get("/applications/<app_id>/messages")
def list_messages(app_id):
    lifecycle = get_lifecycle()
    lifecycle.get_application(app_id)
    return jsonify([m.to_dict() for m in lifecycle.list_messages(app_id)])


@bp.post("/applications/<app_id>/message")
def send_message(app_id):
    lifecycle = get_lifecycle()
    app_row = lifecycle.get_application(app_id)
    if app_row.is_closed:
        return jsonify({"message": "Interview already submitted"}), 400
    form = MessageForm()
    if not form.validate_on_submit():
        return jsonify({"message": "Message content is required", "errors": form.errors}), 400
    outcome = lifecycle.send_message(app_id, form.content.data)
    return jsonify(outcome.to_dict())


@bp.post("/applications/<app_id>/submit")
def submit(app_id):
    get_lifecycle().submit(app_id)
    return jsonify({"message": "Interview submitted successfully"})
