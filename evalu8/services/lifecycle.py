"""Application lifecycle: intake, the turn loop, submission and scoring.

Status flow::

    (intake) -> in_progress -> submitted -> evaluated
                                   \\            \\
                                    +-> accepted / rejected (recruiter)

Candidate turns and submission are refused once an application is
``submitted`` or ``evaluated``. Recruiter status edits are unconditional
writes guarded only by job ownership.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import Forbidden, InterviewClosed, InvalidRequest, NotFound
from ..extensions import db
from ..models.application import Application, STATUSES
from ..models.evaluation import Evaluation
from ..models.flag import Flag
from ..models.job import Job
from ..models.message import Message
from .conductor import count_questions

logger = logging.getLogger(__name__)

CANDIDATE_FIELDS = ("candidate_name", "candidate_email", "location", "work_auth",
                    "availability_date", "years_experience", "desired_comp")


@dataclass
class TurnOutcome:
    message: Message
    stage: str
    questions_asked: int
    num_questions: int
    time_limit_minutes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message.to_dict(),
            "stage": self.stage,
            "questionsAsked": self.questions_asked,
            "numQuestions": self.num_questions,
            "timeLimitMinutes": self.time_limit_minutes,
        }


def get_lifecycle() -> "ApplicationLifecycle":
    return current_app.extensions["evalu8.lifecycle"]


class ApplicationLifecycle:
    def __init__(self, conductor, scorer, lock):
        self.conductor = conductor
        self.scorer = scorer
        self.lock = lock

    # -- lookups -----------------------------------------------------------

    def get_public_job(self, job_token: str) -> Job:
        job = Job.query.filter_by(job_token=job_token).first() if job_token else None
        if job is None or not job.is_active:
            raise NotFound("Job not found or inactive")
        return job

    def get_application(self, application_id: str) -> Application:
        app_row = db.session.get(Application, application_id)
        if app_row is None:
            raise NotFound("Application not found")
        return app_row

    def _job_for(self, app_row: Application) -> Job:
        job = db.session.get(Job, app_row.job_id)
        if job is None:
            raise NotFound("Job not found")
        return job

    def owned_job(self, job_id: str, owner_id: int) -> Job:
        job = db.session.get(Job, job_id)
        if job is None:
            raise NotFound("Job not found")
        if job.owner_id != owner_id:
            raise Forbidden()
        return job

    def owned_application(self, application_id: str, owner_id: int):
        app_row = self.get_application(application_id)
        job = db.session.get(Job, app_row.job_id)
        if job is None or job.owner_id != owner_id:
            raise Forbidden()
        return app_row, job

    def list_messages(self, application_id: str) -> List[Message]:
        return (Message.query.filter_by(application_id=application_id)
                .order_by(Message.seq.asc()).all())

    def list_flags(self, application_id: str) -> List[Flag]:
        return (Flag.query.filter_by(application_id=application_id)
                .order_by(Flag.seq.asc()).all())

    def get_evaluation(self, application_id: str) -> Optional[Evaluation]:
        return Evaluation.query.filter_by(application_id=application_id).first()

    # -- candidate flow ----------------------------------------------------

    def start_application(self, job_token: str, candidate: Dict[str, Any]) -> Application:
        job = self.get_public_job(job_token)
        fields = {k: candidate.get(k) for k in CANDIDATE_FIELDS if candidate.get(k) not in (None, "")}
        app_row = Application(job_id=job.id, status="in_progress", **fields)
        db.session.add(app_row)
        db.session.commit()
        logger.info("application %s started for job %s", app_row.id, job.id)
        return app_row

    def _next_seq(self, model, application_id: str) -> int:
        last = (db.session.query(db.func.coalesce(db.func.max(model.seq), 0))
                .filter(model.application_id == application_id).scalar())
        return int(last) + 1

    def _append_message(self, application_id: str, role: str, content: str) -> Message:
        msg = Message(application_id=application_id, seq=self._next_seq(Message, application_id),
                      role=role, content=content)
        db.session.add(msg)
        return msg

    def send_message(self, application_id: str, content: str) -> TurnOutcome:
        app_row = self.get_application(application_id)
        if app_row.is_closed:
            raise InterviewClosed()
        if not content or not content.strip():
            raise InvalidRequest("Message content is required")
        job = self._job_for(app_row)

        with self.lock.hold(application_id):
            # status may have changed while another request held the lock
            db.session.refresh(app_row)
            if app_row.is_closed:
                raise InterviewClosed()

            self._append_message(application_id, "user", content)
            db.session.commit()

            history = self.list_messages(application_id)
            turn = self.conductor.next_turn(job, history)

            reply = self._append_message(application_id, "assistant", turn.assistant_message)
            seq = self._next_seq(Flag, application_id)
            for offset, f in enumerate(turn.flags):
                db.session.add(Flag(application_id=application_id, seq=seq + offset, severity=f.severity,
                                    category=f.category, excerpt=f.excerpt))
            db.session.commit()

        if turn.flags:
            logger.info("application %s: %d flag(s) recorded", application_id, len(turn.flags))
        return TurnOutcome(
            message=reply,
            stage=turn.stage,
            questions_asked=count_questions(history) + 1,
            num_questions=job.num_questions,
            time_limit_minutes=job.time_limit_minutes,
        )

    def submit(self, application_id: str) -> Application:
        app_row = self.get_application(application_id)
        if app_row.is_closed:
            raise InterviewClosed()
        job = self._job_for(app_row)

        with self.lock.hold(application_id):
            db.session.refresh(app_row)
            if app_row.is_closed:
                raise InterviewClosed()
            app_row.submitted_at = datetime.utcnow()
            if self.get_evaluation(application_id) is not None:
                # reopened by a recruiter after scoring; the scorecard stands
                app_row.status = "evaluated"
                db.session.commit()
                logger.info("application %s resubmitted; keeping its evaluation", application_id)
                return app_row
            app_row.status = "submitted"
            db.session.commit()

            history = self.list_messages(application_id)
            if history:
                try:
                    self._attach_evaluation(app_row, job, history)
                except Exception:
                    # submission stands; the application stays `submitted` for re-evaluation
                    db.session.rollback()
                    logger.exception("evaluation failed for application %s", application_id)
        return app_row

    # -- scoring -----------------------------------------------------------

    def _attach_evaluation(self, app_row: Application, job: Job, history) -> Evaluation:
        card = self.scorer.score(job, history)
        ev = Evaluation.from_scorecard(app_row.id, card)
        db.session.add(ev)
        app_row.status = "evaluated"
        db.session.commit()
        logger.info("application %s evaluated: overall=%s recommendation=%s",
                    app_row.id, ev.overall_score, ev.recommendation)
        return ev

    def evaluate(self, application_id: str) -> Evaluation:
        """Attach the scorecard to a submitted application that has none yet."""
        app_row = self.get_application(application_id)
        job = self._job_for(app_row)
        with self.lock.hold(application_id):
            db.session.refresh(app_row)
            if self.get_evaluation(application_id) is not None:
                raise InvalidRequest("Application already evaluated")
            if app_row.status != "submitted":
                raise InvalidRequest("Only submitted applications can be evaluated")
            history = self.list_messages(application_id)
            if not history:
                raise InvalidRequest("Application has no transcript")
            try:
                return self._attach_evaluation(app_row, job, history)
            except IntegrityError:
                # another process stored a scorecard first
                db.session.rollback()
                raise InvalidRequest("Application already evaluated")

    # -- recruiter flow ----------------------------------------------------

    def list_applications(self, job_id: str, owner_id: int) -> List[Dict[str, Any]]:
        self.owned_job(job_id, owner_id)
        rows = (Application.query.filter_by(job_id=job_id)
                .order_by(Application.started_at.desc()).all())
        evals = {}
        if rows:
            evals = {e.application_id: e for e in
                     Evaluation.query.filter(Evaluation.application_id.in_([r.id for r in rows])).all()}
        out = []
        for r in rows:
            d = r.to_dict()
            ev = evals.get(r.id)
            d["evaluation"] = ev.to_dict() if ev else None
            out.append(d)
        return out

    def set_status(self, application_id: str, owner_id: int, status: str) -> Application:
        app_row, _job = self.owned_application(application_id, owner_id)
        if status not in STATUSES:
            raise InvalidRequest(f"Unknown status: {status}")
        app_row.status = status
        db.session.commit()
        logger.info("application %s status set to %s by user %s", application_id, status, owner_id)
        return app_row

    def build_report(self, application_id: str, owner_id: int) -> Dict[str, Any]:
        app_row, job = self.owned_application(application_id, owner_id)
        ev = self.get_evaluation(application_id)
        return {
            "application": app_row.to_dict(),
            "job": job.to_dict(),
            "evaluation": ev.to_dict() if ev else None,
            "flags": [f.to_dict() for f in self.list_flags(application_id)],
            "messages": [m.to_dict() for m in self.list_messages(application_id)],
        }
