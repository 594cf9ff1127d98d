from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from ..config import DbConfig

logger = logging.getLogger(__name__)


def make_engine(config: DbConfig) -> Engine:
    """Create a SQLAlchemy Engine from a DbConfig."""
    engine = create_engine(
        config.database_url,
        echo=config.echo,
        pool_pre_ping=config.pool_pre_ping,
    )
    logger.info("Created engine for %s", engine.url.render_as_string(hide_password=True))
    return engine
