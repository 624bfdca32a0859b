# burnnote/infra/init_db.py

from burnnote.config import Settings
from burnnote.infra.postgres import build_engine, init_db, check_connection
from burnnote.utils.logger import setup_logger


def main():
    """Create all tables in the configured database"""
    settings = Settings.from_env()
    setup_logger(settings.log_level)

    engine = build_engine(settings.database_url)
    if not check_connection(engine):
        raise SystemExit(1)
    init_db(engine)


if __name__ == "__main__":
    main()
