# utils/db.py

import logging
from urllib.parse import quote_plus

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from .config import config

logger = logging.getLogger(__name__)

_engine = None


def build_db_url(db_config: dict) -> str:
    """Build the MySQL connection URL from DB_CONFIG"""
    return (
        f"mysql+pymysql://{quote_plus(str(db_config['user']))}:{quote_plus(str(db_config['password']))}"
        f"@{db_config['host']}:{db_config.get('port', 3306)}/{db_config['database']}"
    )


def get_db_engine() -> Engine:
    """
    Get the shared SQLAlchemy engine, creating it on first use.

    Raises:
        ValueError: if the database configuration is incomplete
    """
    global _engine
    if _engine is not None:
        return _engine

    missing = config.missing_db_settings()
    if missing:
        raise ValueError(
            f"Missing required database configuration ({', '.join(missing)}). Please check .env file."
        )

    _engine = create_engine(
        build_db_url(config.get_db_config()),
        pool_size=config.get_app_setting('DB_POOL_SIZE', 5),
        pool_recycle=config.get_app_setting('DB_POOL_RECYCLE', 3600),
        pool_pre_ping=True,
    )
    logger.info("Database engine created")
    return _engine
