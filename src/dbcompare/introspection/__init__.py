"""Schema introspection over information_schema."""

from .introspector import attach_column_names, introspect_tables
from .models import TableDescriptor
from .query import build_column_names_query, build_tables_query

__all__ = [
    "TableDescriptor",
    "attach_column_names",
    "build_column_names_query",
    "build_tables_query",
    "introspect_tables",
]
