from .memory_backend import InMemoryPersistence
from .sqlalchemy_backend import SqlAlchemyPersistence

__all__ = ["InMemoryPersistence", "SqlAlchemyPersistence"]
