from __future__ import annotations

from botanica.auth import delete_expired_sessions
from botanica.config import Settings
from botanica.db import Base, build_engine, build_session_factory


def main() -> None:
    settings = Settings()
    engine = build_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)

    db = build_session_factory(engine)()
    try:
        removed = delete_expired_sessions(db)
    finally:
        db.close()
    print(f"Removed {removed} expired sessions.")


if __name__ == "__main__":
    main()
