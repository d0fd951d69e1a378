"""Local database models and initialisation."""

from .db_init import build_session_factory, init_db
from .db_models import Base

__all__ = ["Base", "build_session_factory", "init_db"]
