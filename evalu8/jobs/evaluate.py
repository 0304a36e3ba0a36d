from flask import current_app, has_app_context
from ..extensions import db
from ..models.application import Application
from ..models.evaluation import Evaluation
from ..services.lifecycle import get_lifecycle


def pending_application_ids():
    """Submitted applications that never got a scorecard."""
    rows = (
        db.session.query(Application.id)
        .outerjoin(Evaluation, Evaluation.application_id == Application.id)
        .filter(Application.status == "submitted")
        .filter(Evaluation.id.is_(None))
        .order_by(Application.submitted_at.asc())
        .all()
    )
    return [r.id for r in rows]


def _run_evaluate_application(application_id: str):
    ev = get_lifecycle().evaluate(application_id)
    current_app.logger.info("re-evaluated application %s -> evaluation %s", application_id, ev.id)
    return ev.id


def evaluate_application(application_id: str):
    """Entrypoint that ensures execution inside a Flask app context for workers."""
    if has_app_context():
        return _run_evaluate_application(application_id)
    from evalu8 import create_app
    app = create_app()
    with app.app_context():
        return _run_evaluate_application(application_id)
