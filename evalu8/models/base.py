from uuid import uuid4
from ..extensions import db


def new_id():
    return uuid4().hex


class TokenIdMixin:
    # opaque ids; application ids travel in unauthenticated candidate URLs
    id = db.Column(db.String(32), primary_key=True, default=new_id)

class TimestampMixin:
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())
