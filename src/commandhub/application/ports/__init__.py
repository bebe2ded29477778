from .permission_port import PermissionPolicy, PermissivePolicy, RolePermissionPolicy
from .persistence_port import PersistenceBackend
from .event_log_port import CommandEventLog, ExecutionRecord

__all__ = [
    "PermissionPolicy",
    "PermissivePolicy",
    "RolePermissionPolicy",
    "PersistenceBackend",
    "CommandEventLog",
    "ExecutionRecord",
]
