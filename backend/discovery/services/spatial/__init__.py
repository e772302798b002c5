"""Spatial stores answering radius and bounding-box queries."""

from .base import EstablishmentReader
from .grid_store import GridIndexStore
from .sql_store import SqlEstablishmentStore

__all__ = [
    "EstablishmentReader",
    "GridIndexStore",
    "SqlEstablishmentStore",
]
