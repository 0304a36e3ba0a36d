"""Queue re-evaluation for submitted applications that have no scorecard.

Submission keeps an application `submitted` when scoring failed part way;
this sweep gives each of them one more scoring pass.

Usage:
  python scripts/reevaluate_submitted.py [--dry-run]
"""

import argparse
import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from evalu8 import create_app
from evalu8.extensions import rq
from evalu8.jobs.evaluate import evaluate_application, pending_application_ids


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('--dry-run', action='store_true', help='only list the applications')
    args = parser.parse_args(argv)

    app = create_app()
    with app.app_context():
        ids = pending_application_ids()
        app.logger.info('%d submitted application(s) without evaluation', len(ids))
        for app_id in ids:
            if args.dry_run:
                print(app_id)
                continue
            rq.enqueue(evaluate_application, app_id)
    return 0


if __name__ == '__main__':
    sys.exit(main())
