"""
Repository pattern: fluent query clauses, primary-key upserts and request input shaping over SQLModel.
"""

from .base import BaseRepository, IRepository
from .inputs import InputBag
from .pagination import Page
from .query import QuerySpec
from .schema import EntitySchema
from .unit_of_work import UnitOfWork

__all__ = ["BaseRepository", "IRepository", "InputBag", "Page", "QuerySpec", "EntitySchema", "UnitOfWork"]
