"""Run an RQ worker inside the Flask app context.

Usage:
  source .venv/bin/activate
  export OBJC_DISABLE_INITIALIZE_FORK_SAFETY=YES   # macOS fork safety if needed
  python scripts/run_rq_worker.py

Re-evaluation jobs call the lifecycle through `current_app`, so the app and
its extensions must be initialised in the worker process.
"""

import sys
import os

# Ensure project root is on sys.path when running from scripts/ or other cwd
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from evalu8 import create_app
import redis
from rq import Worker, Queue


def main():
    app = create_app()
    redis_url = app.config.get('REDIS_URL') or os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
    conn = redis.from_url(redis_url)
    with app.app_context():
        q = Queue('default', connection=conn)
        worker = Worker([q], connection=conn)
        app.logger.info('RQ worker starting (pid %s)', os.getpid())
        try:
            worker.work(burst=False, with_scheduler=True, logging_level=app.config.get('LOG_LEVEL', 'INFO'))
        finally:
            app.logger.info('RQ worker exiting (pid %s)', os.getpid())


if __name__ == '__main__':
    main()
