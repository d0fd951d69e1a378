"""Layout store implementations."""

from .interfaces import LayoutStore
from .sqlalchemy_layout_store import SqlAlchemyLayoutStore
from .supabase_layout_store import SupabaseLayoutStore

__all__ = ["LayoutStore", "SqlAlchemyLayoutStore", "SupabaseLayoutStore"]
