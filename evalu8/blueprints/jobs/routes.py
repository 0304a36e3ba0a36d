from flask import current_app, jsonify, request
from flask_login import current_user
from . import bp
from .forms import JobForm, StatusForm
from ...extensions import db, rq
from ...jobs.evaluate import evaluate_application
from ...models.job import Job
from ...services.lifecycle import get_lifecycle
from ...services.scorer import SCORE_FIELDS
from ...utils.decorators import recruiter_required


def _coerce_weights(val):
    # Accept {"decisionQuality": 0.3, ...}; empty/absent means unweighted.
    if val is None or val == "" or val == {}:
        return None
    if not isinstance(val, dict):
        return False
    out = {}
    for k, v in val.items():
        if k not in SCORE_FIELDS or k == "overallScore":
            return False
        if isinstance(v, bool) or not isinstance(v, (int, float)) or v < 0:
            return False
        out[k] = v
    return out


def _form_errors(form):
    return jsonify({"message": "Invalid request", "errors": form.errors}), 400


@bp.post("/jobs")
@recruiter_required
def create_job():
    form = JobForm()
    if not form.validate_on_submit():
        return _form_errors(form)
    weights = _coerce_weights((request.get_json(silent=True) or {}).get("scoringWeights"))
    if weights is False:
        return jsonify({"message": "Invalid request",
                        "errors": {"scoring_weights": ["Must map dimension names to non-negative numbers."]}}), 400
    job = Job(
        owner_id=current_user.id,
        title=form.title.data.strip(),
        description=form.description.data.strip(),
        simulation_type=form.simulation_type.data,
        seniority_level=form.seniority_level.data,
        time_limit_minutes=form.time_limit_minutes.data,
        num_questions=form.num_questions.data,
        scoring_weights=weights,
    )
    db.session.add(job)
    db.session.commit()
    current_app.logger.info("job %s created by user %s", job.id, current_user.id)
    return jsonify(job.to_dict()), 201


@bp.get("/jobs")
@recruiter_required
def list_jobs():
    jobs = Job.query.filter_by(owner_id=current_user.id).order_by(Job.created_at.desc()).all()
    return jsonify([j.to_dict() for j in jobs])


@bp.get("/jobs/<job_id>")
@recruiter_required
def get_job(job_id):
    job = get_lifecycle().owned_job(job_id, current_user.id)
    return jsonify(job.to_dict())


@bp.get("/jobs/<job_id>/applications")
@recruiter_required
def list_applications(job_id):
    return jsonify(get_lifecycle().list_applications(job_id, current_user.id))


@bp.get("/applications/<app_id>/report")
@recruiter_required
def report(app_id):
    return jsonify(get_lifecycle().build_report(app_id, current_user.id))


@bp.patch("/applications/<app_id>/status")
@recruiter_required
def update_status(app_id):
    form = StatusForm()
    if not form.validate_on_submit():
        return _form_errors(form)
    app_row = get_lifecycle().set_status(app_id, current_user.id, form.status.data)
    return jsonify(app_row.to_dict())


@bp.post("/applications/<app_id>/evaluate")
@recruiter_required
def reevaluate(app_id):
    lifecycle = get_lifecycle()
    app_row, _job = lifecycle.owned_application(app_id, current_user.id)
    if lifecycle.get_evaluation(app_id) is not None:
        return jsonify({"message": "Application already evaluated"}), 400
    if app_row.status != "submitted":
        return jsonify({"message": "Only submitted applications can be evaluated"}), 400
    if not lifecycle.list_messages(app_id):
        return jsonify({"message": "Application has no transcript"}), 400
    result = rq.enqueue(evaluate_application, app_id)
    if result is not None and not isinstance(result, str):
        return jsonify({"job_id": result.id}), 202
    # ran inline: the result is the evaluation id, or None if scoring failed
    ev = lifecycle.get_evaluation(app_id)
    if result is None or ev is None:
        return jsonify({"message": "Evaluation failed"}), 500
    return jsonify(ev.to_dict()), 200
