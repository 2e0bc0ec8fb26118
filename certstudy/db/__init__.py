# Database layer
from certstudy.db.database import (
    create_db_engine,
    get_engine,
    get_session,
    get_session_factory,
    init_db,
    session_scope,
)

__all__ = [
    "create_db_engine",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_db",
    "session_scope",
]
