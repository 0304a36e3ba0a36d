import pytest

from evalu8 import create_app
from evalu8.extensions import db
from evalu8.models.job import Job
from evalu8.models.user import User


class TestConfig:
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = ""
    LOG_LEVEL = "DEBUG"
    WTF_CSRF_ENABLED = False
    OPENAI_API_KEY = None
    JOB_TIME_LIMIT_MIN = 5
    JOB_TIME_LIMIT_MAX = 120
    JOB_NUM_QUESTIONS_MIN = 1
    JOB_NUM_QUESTIONS_MAX = 20
    TURN_LOCK_TTL = 30


DEFAULT_TURN = {"assistant_message": "What would you do next?", "detected_flags": [], "stage": "questioning"}


class FakeGateway:
    """Stands in for ModelGateway; replies are served in order, exceptions are raised."""

    def __init__(self):
        self.replies = []
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)

    def complete(self, system_prompt, turns, schema_hint=None):
        self.calls.append({"system": system_prompt, "turns": [dict(t) for t in turns], "schema": schema_hint})
        reply = self.replies.pop(0) if self.replies else dict(DEFAULT_TURN)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def app(gateway):
    app = create_app(TestConfig, gateway=gateway)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def lifecycle(app):
    return app.extensions["evalu8.lifecycle"]


@pytest.fixture
def recruiter(app):
    user = User(email="recruiter@example.com", role="recruiter")
    user.set_password("password123")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def make_job(recruiter):
    def _make(**kw):
        fields = dict(owner_id=recruiter.id, title="Operations Lead",
                      description="Own incident response for a logistics platform.",
                      simulation_type="crisis_management", seniority_level="senior",
                      time_limit_minutes=20, num_questions=3)
        fields.update(kw)
        job = Job(**fields)
        db.session.add(job)
        db.session.commit()
        return job
    return _make


@pytest.fixture
def job(make_job):
    return make_job()


@pytest.fixture
def logged_in(client, recruiter):
    r = client.post("/api/auth/login", json={"email": "recruiter@example.com", "password": "password123"})
    assert r.status_code == 200
    return client
