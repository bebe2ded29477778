from .sqlalchemy_db import SessionProvider, create_db_engine, get_db_url
from .models import Base, CommandExecutionModel

__all__ = ["SessionProvider", "create_db_engine", "get_db_url", "Base", "CommandExecutionModel"]
