from .session import check_connection, create_db_engine, create_session_factory, init_schema
from .tables import AutomationJob, AutomationResult, Base, Document

__all__ = [
    "AutomationJob",
    "AutomationResult",
    "Base",
    "Document",
    "check_connection",
    "create_db_engine",
    "create_session_factory",
    "init_schema",
]
