"""
Database Infrastructure Package for the UniGuide prediction backend

Exports database utilities.
"""

from uniguide.infrastructure.db.database import (
    DatabaseManager,
    get_db_manager,
    get_session_context,
    init_db,
    check_db,
    close_db,
)


__all__ = [
    "DatabaseManager",
    "get_db_manager",
    "get_session_context",
    "init_db",
    "check_db",
    "close_db",
]
