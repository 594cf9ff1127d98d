from .engine import make_engine
from .schema import create_schema, drop_schema
from .session import DbSession

__all__ = ["DbSession", "make_engine", "create_schema", "drop_schema"]
