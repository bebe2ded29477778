# commandhub/config/settings.py

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

_TRUE = ("1", "true", "yes", "on")


@dataclass
class DatabaseConfig:
    """Persistence backend configuration"""
    backend: str = "sqlalchemy"  # sqlalchemy / memory / none
    url: str = ""                # empty -> COMMANDHUB_DB_URL or the sqlite default
    echo: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    file: Optional[str] = None
    max_size: int = 10485760  # 10MB
    backup_count: int = 5
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class OrchestratorConfig:
    """Dispatch engine configuration"""
    execution_timeout_seconds: Optional[float] = None  # None: handlers may run indefinitely
    expose_error_details: bool = False                 # stack traces in envelopes (debug only)
    health_probe_timeout: float = 5.0
    event_log: List[str] = field(default_factory=lambda: ["logging"])  # logging / memory / sqlalchemy
    register_system_commands: bool = True


@dataclass
class PermissionsConfig:
    """Permission policy configuration"""
    policy: str = "permissive"  # permissive / role
    role_grants: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class ApiConfig:
    """HTTP adapter configuration"""
    title: str = "CommandHub API"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    default_role: str = "user"


@dataclass
class Settings:
    """Main settings"""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    permissions: PermissionsConfig = field(default_factory=PermissionsConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    @classmethod
    def load_from_file(cls, config_path: Optional[str] = None) -> "Settings":
        """Load from YAML; a missing file yields defaults."""
        if config_path is None:
            return cls()

        path = Path(config_path)
        if not path.exists():
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "Settings":
        settings = cls()

        if "database" in config_data:
            settings.database = DatabaseConfig(**config_data["database"])

        if "logging" in config_data:
            settings.logging = LoggingConfig(**config_data["logging"])

        if "orchestrator" in config_data:
            settings.orchestrator = OrchestratorConfig(**config_data["orchestrator"])

        if "permissions" in config_data:
            settings.permissions = PermissionsConfig(**config_data["permissions"])

        if "api" in config_data:
            settings.api = ApiConfig(**config_data["api"])

        return settings

    def load_environment_variables(self) -> "Settings":
        """Environment overrides (COMMANDHUB_*)."""
        db_url = os.getenv("COMMANDHUB_DB_URL")
        if db_url:
            self.database.url = db_url
        db_backend = os.getenv("COMMANDHUB_DB_BACKEND")
        if db_backend:
            self.database.backend = db_backend

        log_level = os.getenv("COMMANDHUB_LOG_LEVEL")
        if log_level:
            self.logging.level = log_level
        log_file = os.getenv("COMMANDHUB_LOG_FILE")
        if log_file:
            self.logging.file = log_file

        timeout = os.getenv("COMMANDHUB_EXECUTION_TIMEOUT")
        if timeout:
            try:
                self.orchestrator.execution_timeout_seconds = float(timeout)
            except ValueError:
                pass
        expose = os.getenv("COMMANDHUB_EXPOSE_ERROR_DETAILS")
        if expose is not None:
            self.orchestrator.expose_error_details = expose.lower() in _TRUE

        policy = os.getenv("COMMANDHUB_PERMISSION_POLICY")
        if policy:
            self.permissions.policy = policy

        return self
