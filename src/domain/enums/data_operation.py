"""Data access operations recorded by the audit trail."""

from enum import Enum


class DataOperation(str, Enum):
    """CRUD-style operation on a stored resource."""

    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    EXPORT = "EXPORT"
