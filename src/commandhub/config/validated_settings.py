"""
pydantic-validated settings loading.

The SettingsModel ignores unknown keys and rejects bad types, then converts
into the dataclass `Settings` the rest of the code consumes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .settings import (
    ApiConfig,
    DatabaseConfig,
    LoggingConfig,
    OrchestratorConfig,
    PermissionsConfig,
    Settings,
)


class DatabaseConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    backend: Literal["sqlalchemy", "memory", "none"] = "sqlalchemy"
    url: str = ""
    echo: bool = False


class LoggingConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    level: str = "INFO"
    file: Optional[str] = None
    max_size: int = Field(10485760, gt=0)
    backup_count: int = Field(5, ge=0)
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class OrchestratorConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    execution_timeout_seconds: Optional[float] = Field(None, gt=0)
    expose_error_details: bool = False
    health_probe_timeout: float = Field(5.0, gt=0)
    event_log: List[Literal["logging", "memory", "sqlalchemy"]] = Field(default_factory=lambda: ["logging"])
    register_system_commands: bool = True


class PermissionsConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    policy: Literal["permissive", "role"] = "permissive"
    role_grants: Dict[str, List[str]] = Field(default_factory=dict)


class ApiConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = "CommandHub API"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    default_role: str = "user"


class SettingsModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    database: DatabaseConfigModel = Field(default_factory=DatabaseConfigModel)
    logging: LoggingConfigModel = Field(default_factory=LoggingConfigModel)
    orchestrator: OrchestratorConfigModel = Field(default_factory=OrchestratorConfigModel)
    permissions: PermissionsConfigModel = Field(default_factory=PermissionsConfigModel)
    api: ApiConfigModel = Field(default_factory=ApiConfigModel)

    def to_dataclass(self) -> Settings:
        s = Settings()
        s.database = DatabaseConfig(**self.database.model_dump())
        s.logging = LoggingConfig(**self.logging.model_dump())
        s.orchestrator = OrchestratorConfig(**self.orchestrator.model_dump())
        s.permissions = PermissionsConfig(**self.permissions.model_dump())
        s.api = ApiConfig(**self.api.model_dump())
        return s


def load_validated_settings(config_path: Optional[str] = None, *, apply_env: bool = True) -> Settings:
    """Validate YAML with pydantic and return the Settings dataclass."""
    data = {}
    if config_path:
        cfg_file = Path(config_path)
        if cfg_file.exists():
            data = yaml.safe_load(cfg_file.read_text(encoding="utf-8")) or {}
    settings = SettingsModel(**data).to_dataclass()
    if apply_env:
        settings.load_environment_variables()
    return settings
