from ..extensions import db
from .base import TokenIdMixin

STATUSES = ("pending", "in_progress", "submitted", "evaluated", "accepted", "rejected")
# no further candidate turns and no second submission once in one of these
CLOSED_STATUSES = ("submitted", "evaluated")


class Application(db.Model, TokenIdMixin):
    __tablename__ = "applications"
    job_id = db.Column(db.String(32), db.ForeignKey("jobs.id"), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="pending")

    candidate_name = db.Column(db.String(120), nullable=False)
    candidate_email = db.Column(db.String(254), nullable=False)
    location = db.Column(db.String(200))
    work_auth = db.Column(db.String(50))
    availability_date = db.Column(db.String(50))
    years_experience = db.Column(db.Integer)
    desired_comp = db.Column(db.String(100))

    started_at = db.Column(db.DateTime, server_default=db.func.now())
    submitted_at = db.Column(db.DateTime)

    @property
    def is_closed(self):
        return self.status in CLOSED_STATUSES

    def to_dict(self):
        return {
            "id": self.id,
            "jobId": self.job_id,
            "status": self.status,
            "candidateName": self.candidate_name,
            "candidateEmail": self.candidate_email,
            "location": self.location,
            "workAuth": self.work_auth,
            "availabilityDate": self.availability_date,
            "yearsExperience": self.years_experience,
            "desiredComp": self.desired_comp,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "submittedAt": self.submitted_at.isoformat() if self.submitted_at else None,
        }
