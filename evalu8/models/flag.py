from ..extensions import db
from .base import TokenIdMixin

SEVERITIES = ("low", "medium", "high", "critical")


class Flag(db.Model, TokenIdMixin):
    __tablename__ = "flags"
    __table_args__ = (db.UniqueConstraint("application_id", "seq", name="uq_flags_application_seq"),)

    application_id = db.Column(db.String(32), db.ForeignKey("applications.id"), nullable=False, index=True)
    # detection order within the application, kept across a turn with several flags
    seq = db.Column(db.Integer, nullable=False)
    severity = db.Column(db.String(20), nullable=False)
    category = db.Column(db.String(120), nullable=False)
    excerpt = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "applicationId": self.application_id,
            "severity": self.severity,
            "category": self.category,
            "excerpt": self.excerpt,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
