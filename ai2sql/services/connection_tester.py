# ai2sql/services/connection_tester.py
import logging
from typing import Dict, Union

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL

logger = logging.getLogger(__name__)

DRIVER_NAME = "postgresql"
CONNECT_TIMEOUT_SECONDS = 5


def build_url(connection) -> URL:
    return URL.create(
        DRIVER_NAME,
        username=connection.username,
        password=connection.password or None,
        host=connection.host,
        port=connection.port,
        database=connection.database,
    )


def check_connection(connection) -> Dict[str, Union[bool, str]]:
    """
    Try to open a connection to a project's target database and run SELECT 1.
    Never raises; failures are reported in the result.
    """
    engine = None
    try:
        engine = create_engine(
            build_url(connection),
            connect_args={"connect_timeout": CONNECT_TIMEOUT_SECONDS},
            pool_pre_ping=True,
        )
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info(f"Connection test succeeded for {connection.host}:{connection.port}/{connection.database}")
        return {"success": True, "detail": "Connection established successfully"}
    except Exception as e:
        logger.error(f"Connection test failed for {connection.host}:{connection.port}: {str(e)}")
        return {"success": False, "detail": f"Could not connect to the database: {str(e)}"}
    finally:
        if engine is not None:
            engine.dispose()
