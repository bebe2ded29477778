from .logging_event_log import LoggingEventLog
from .memory_event_log import InMemoryEventLog
from .sqlalchemy_event_log import SqlAlchemyEventLog
from .composite_event_log import CompositeEventLog

__all__ = ["LoggingEventLog", "InMemoryEventLog", "SqlAlchemyEventLog", "CompositeEventLog"]
