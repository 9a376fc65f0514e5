"""Create the database schema: ``python -m webapp.db.create_tables``."""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from webapp.core.config import get_settings
from .session import init_db


def main() -> None:
    try:
        init_db()
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
    print(f"Schema ready on {get_settings().database_url}")


if __name__ == "__main__":
    main()
