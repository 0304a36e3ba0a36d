import threading
from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from redis import Redis
from rq import Queue
from flask import current_app

from .errors import TurnInProgress

# kwargs accepted by Queue.enqueue that the job function itself must not see
RQ_KEYS = {'job_timeout', 'timeout', 'at_front', 'depends_on', 'result_ttl', 'ttl', 'meta', 'description'}


def _connect_redis(app):
    url = app.config.get("REDIS_URL")
    if not url:
        return None
    try:
        conn = Redis.from_url(url)
        conn.ping()
        return conn
    except Exception:
        app.logger.warning('Redis at %s unreachable, using in-process fallbacks', url)
        return None


class RQWrapper:
    def __init__(self):
        self.redis = None
        self.queue = None

    def init_app(self, app):
        self.redis = _connect_redis(app)
        self.queue = Queue("default", connection=self.redis) if self.redis is not None else None

    def _run_inline(self, args, kwargs):
        func = args[0] if args else None
        if func is None:
            return None
        safe_kwargs = {k: v for k, v in kwargs.items() if k not in RQ_KEYS}
        try:
            return func(*args[1:], **safe_kwargs)
        except Exception:
            current_app.logger.exception('Synchronous fallback execution failed')
        return None

    def enqueue(self, *args, **kwargs):
        # Prefer enqueueing to RQ, fall back to calling the function
        # synchronously if Redis is not configured or not reachable.
        if not self.queue:
            return self._run_inline(args, kwargs)
        try:
            return self.queue.enqueue(*args, **kwargs)
        except Exception:
            current_app.logger.exception('RQ enqueue failed, falling back to sync execution')
            return self._run_inline(args, kwargs)


class TurnLock:
    """At most one in-flight interview turn per application.

    Uses a non-blocking redis lock when redis is available so that several
    worker processes agree; otherwise a lock per application id held in this
    process.
    """

    def __init__(self):
        self.redis = None
        self.ttl = 180
        self._guard = threading.Lock()
        self._local = {}

    def init_app(self, app):
        self.redis = _connect_redis(app)
        self.ttl = int(app.config.get("TURN_LOCK_TTL", 180))

    @contextmanager
    def hold(self, application_id):
        if self.redis is not None:
            lock = self.redis.lock(f"evalu8:turn:{application_id}", timeout=self.ttl)
            if not lock.acquire(blocking=False):
                raise TurnInProgress()
            try:
                yield
            finally:
                try:
                    lock.release()
                except Exception:
                    # expired under us; nothing left to release
                    current_app.logger.warning('turn lock for %s already released', application_id)
            return

        with self._guard:
            lock = self._local.setdefault(application_id, threading.Lock())
            if not lock.acquire(blocking=False):
                raise TurnInProgress()
        try:
            yield
        finally:
            with self._guard:
                lock.release()
                self._local.pop(application_id, None)


db = SQLAlchemy()
login_manager = LoginManager()
rq = RQWrapper()
turn_lock = TurnLock()
