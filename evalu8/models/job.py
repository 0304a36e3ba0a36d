import secrets
from ..extensions import db
from .base import TokenIdMixin, TimestampMixin

SIMULATION_TYPES = (
    "crisis_management", "client_negotiation", "technical_decision", "team_conflict",
    "budget_planning", "product_launch", "strategic_planning", "general", "problem_solving",
)
SENIORITY_LEVELS = ("junior", "mid", "senior", "lead", "manager", "director", "vp", "c_level")


def new_job_token():
    return secrets.token_hex(12)


class Job(db.Model, TokenIdMixin, TimestampMixin):
    """A recruiter-defined simulation shared with candidates through job_token."""
    __tablename__ = "jobs"

    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    simulation_type = db.Column(db.String(50), nullable=False, default="problem_solving")
    seniority_level = db.Column(db.String(30), nullable=False, default="mid")
    time_limit_minutes = db.Column(db.Integer, nullable=False, default=15)
    num_questions = db.Column(db.Integer, nullable=False, default=8)
    scoring_weights = db.Column(db.JSON)  # {"decisionQuality": 0.3, ...}
    job_token = db.Column(db.String(64), unique=True, nullable=False, default=new_job_token)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self, public=False):
        d = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "simulationType": self.simulation_type,
            "seniorityLevel": self.seniority_level,
            "timeLimitMinutes": self.time_limit_minutes,
            "numQuestions": self.num_questions,
            "jobToken": self.job_token,
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if not public:
            d["ownerId"] = self.owner_id
            d["scoringWeights"] = self.scoring_weights
        return d

    def __repr__(self) -> str:
        return f"<Job id={self.id} title={self.title!r}>"
