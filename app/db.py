from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import event
from contextlib import contextmanager
import sys
import logging
from utils import now_utc
from settings import get_setting

# Retrieve main logger
logger = logging.getLogger("main")

db = SQLAlchemy()
migrate = Migrate()


@contextmanager
def transaction(session=None):
    """Commit on success, roll back and re-raise on any error. Never retried."""
    session = session if session is not None else db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def seed_mock_profiles(session=None):
    """Ensure the well-known seed profiles exist (admin, mod, user, creativecat)."""
    from constants import MOCK_PROFILES
    from models import Profile

    session = session or db.session
    created = 0
    for profile_id, name, usertag, role in MOCK_PROFILES:
        if session.get(Profile, profile_id) is not None:
            continue
        session.add(Profile(id=profile_id, name=name, usertag=usertag, role=role))
        created += 1
    if created:
        session.commit()
        logger.info(f"Seeded {created} mock profile(s).")
    return created


def init_db(app):
    # Import models so their tables are registered on the metadata
    import models  # noqa: F401

    with app.app_context():
        # Ensure foreign keys, WAL mode, and timeout are set when connection is opened
        @event.listens_for(db.engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            import sqlite3
            if not isinstance(dbapi_connection, sqlite3.Connection):
                return

            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            # Enable WAL mode for better concurrent access
            cursor.execute("PRAGMA journal_mode=WAL;")
            # Increase timeout to 30 seconds to handle contention
            cursor.execute("PRAGMA busy_timeout=30000;")
            cursor.close()

        # "flask db ..." commands manage the schema themselves
        if "db" not in sys.argv:
            logger.info("Ensuring database tables exist...")
            db.create_all()

            if app.config.get("SEED_MOCK_PROFILES", get_setting("auth", "seed_mock_profiles", True)):
                seed_mock_profiles()
