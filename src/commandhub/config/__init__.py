from .settings import (
    ApiConfig,
    DatabaseConfig,
    LoggingConfig,
    OrchestratorConfig,
    PermissionsConfig,
    Settings,
)
from .validated_settings import load_validated_settings

__all__ = [
    "ApiConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "OrchestratorConfig",
    "PermissionsConfig",
    "Settings",
    "load_validated_settings",
]
