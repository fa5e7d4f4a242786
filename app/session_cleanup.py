"""
CLI entrypoint for purging expired login sessions. Run from cron, e.g.:

  python -m app.session_cleanup

Or hourly: 0 * * * * cd /path/to/talos && .venv/bin/python -m app.session_cleanup
"""

import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from app.core.database import SessionLocal
from app.services.auth import purge_expired_sessions

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete sessions whose expiry has passed."""
    db = SessionLocal()
    try:
        deleted = purge_expired_sessions(db)
        logger.info("Session cleanup completed: sessions_deleted=%s", deleted)
        return 0
    except SQLAlchemyError as e:
        logger.exception("Session cleanup failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
