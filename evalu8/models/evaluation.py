from ..extensions import db
from .base import TokenIdMixin

RECOMMENDATIONS = ("strong_hire", "hire", "maybe", "no_hire", "strong_no_hire")


class Evaluation(db.Model, TokenIdMixin):
    __tablename__ = "evaluations"
    # one scorecard per application, written once
    application_id = db.Column(db.String(32), db.ForeignKey("applications.id"), nullable=False, unique=True)
    overall_score = db.Column(db.Integer, nullable=False)
    decision_quality = db.Column(db.Integer, nullable=False)
    communication_clarity = db.Column(db.Integer, nullable=False)
    structured_process = db.Column(db.Integer, nullable=False)
    risk_awareness = db.Column(db.Integer, nullable=False)
    professional_judgment = db.Column(db.Integer, nullable=False)
    recommendation = db.Column(db.String(20), nullable=False)
    summary = db.Column(db.Text, nullable=False)
    strengths = db.Column(db.JSON, nullable=False)
    concerns = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    @classmethod
    def from_scorecard(cls, application_id, card):
        return cls(
            application_id=application_id,
            overall_score=card.overall_score,
            decision_quality=card.decision_quality,
            communication_clarity=card.communication_clarity,
            structured_process=card.structured_process,
            risk_awareness=card.risk_awareness,
            professional_judgment=card.professional_judgment,
            recommendation=card.recommendation,
            summary=card.summary,
            strengths=list(card.strengths),
            concerns=list(card.concerns),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "applicationId": self.application_id,
            "overallScore": self.overall_score,
            "decisionQuality": self.decision_quality,
            "communicationClarity": self.communication_clarity,
            "structuredProcess": self.structured_process,
            "riskAwareness": self.risk_awareness,
            "professionalJudgment": self.professional_judgment,
            "recommendation": self.recommendation,
            "summary": self.summary,
            "strengths": self.strengths or [],
            "concerns": self.concerns or [],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
