from ..extensions import db
from .base import TokenIdMixin


class Message(db.Model, TokenIdMixin):
    """One transcript turn. Rows are only ever inserted."""
    __tablename__ = "messages"
    __table_args__ = (db.UniqueConstraint("application_id", "seq", name="uq_messages_application_seq"),)

    application_id = db.Column(db.String(32), db.ForeignKey("applications.id"), nullable=False, index=True)
    # creation order within the application; the transcript is read back by seq
    seq = db.Column(db.Integer, nullable=False)
    role = db.Column(db.String(20), nullable=False)  # user/assistant
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "applicationId": self.application_id,
            "role": self.role,
            "content": self.content,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
