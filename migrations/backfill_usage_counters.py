"""
Maintenance: Backfill usage counters
Date: 2026-10-19

Recomputes accounts.project_count and projects.revision_count from the rows
actually stored. Needed for databases created before the counter columns
existed, since both gates claim slots on these counters.

IMPORTANT:
- Backup your database before running this script
- Adds the counter columns if they are missing
"""

import logging
import sys

from sqlalchemy import inspect, text

from revisify import create_app
from revisify.extensions import db

logger = logging.getLogger("backfill_usage_counters")

COUNTER_COLUMNS = {
    "accounts": "project_count",
    "projects": "revision_count",
}


def ensure_counter_columns():
    insp = inspect(db.engine)
    for table, column in COUNTER_COLUMNS.items():
        cols = [c["name"] for c in insp.get_columns(table)]
        if column not in cols:
            logger.info("Adding %s.%s", table, column)
            db.session.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} INTEGER NOT NULL DEFAULT 0"))
    db.session.commit()


def backfill():
    accounts = db.session.execute(text(
        "UPDATE accounts SET project_count = "
        "(SELECT COUNT(*) FROM projects WHERE projects.account_id = accounts.id)"
    )).rowcount
    projects = db.session.execute(text(
        "UPDATE projects SET revision_count = "
        "(SELECT COUNT(*) FROM revisions WHERE revisions.project_id = projects.id)"
    )).rowcount
    db.session.commit()
    return accounts, projects


def report_over_limit():
    """Projects that already exceed their limit (from races before the counters)."""
    rows = db.session.execute(text(
        "SELECT id, revision_count, revision_limit FROM projects "
        "WHERE revision_count > revision_limit"
    )).all()
    for row in rows:
        logger.warning("Project %s has %d revisions for a limit of %d", row.id, row.revision_count, row.revision_limit)
    return len(rows)


def run_migration():
    app = create_app()

    with app.app_context():
        try:
            ensure_counter_columns()
            accounts, projects = backfill()
            logger.info("Backfilled %d account(s) and %d project(s)", accounts, projects)
            over = report_over_limit()
            if over:
                logger.warning("%d project(s) are over their revision limit; review before enabling constraints", over)
        except Exception:
            db.session.rollback()
            logger.exception("Backfill failed")
            return 1
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    sys.exit(run_migration())
