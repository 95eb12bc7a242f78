"""Process configuration for jwt-issuer.

:class:`IssuerConfig` is a pydantic-settings model. Keyword arguments win;
anything not passed is read from ``JWT_ISSUER_*`` environment variables:

=================================  ==============================  ===========
Variable                           Field                           Default
=================================  ==============================  ===========
``JWT_ISSUER_STORAGE_BACKEND``     ``storage_backend``             ``memory``
``JWT_ISSUER_STORAGE_PATH``        ``storage_path``                (none)
``JWT_ISSUER_LEASE_DURATION``      ``lease_duration_seconds``      ``720h``
``JWT_ISSUER_HOST``                ``host``                        ``127.0.0.1``
``JWT_ISSUER_PORT``                ``port``                        ``8200``
``JWT_ISSUER_LOG_LEVEL``           ``log_level``                   ``INFO``
=================================  ==============================  ===========

A storage path given without a backend selects the filesystem backend.
"""
from __future__ import annotations

import datetime
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jwt_issuer.errors import InvalidDurationError
from jwt_issuer.issuance.lease import DEFAULT_LEASE_DURATION
from jwt_issuer.roles.duration import format_seconds, parse_duration
from jwt_issuer.storage import FilesystemStorage, InMemoryStorage, Storage

ENV_PREFIX = "JWT_ISSUER_"


class IssuerConfig(BaseSettings):
    """Configuration for the issuance service and its entry points."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
    )

    storage_backend: Literal["memory", "filesystem"] = Field(
        default="memory", description="Storage backend type"
    )
    storage_path: Optional[Path] = Field(
        default=None, description="Base directory for the filesystem backend"
    )
    lease_duration_seconds: int = Field(
        default=format_seconds(DEFAULT_LEASE_DURATION),
        gt=0,
        validation_alias=ENV_PREFIX + "LEASE_DURATION",
        description="Fixed lease window for leased credentials",
    )
    host: str = Field(default="127.0.0.1", description="HTTP bind address")
    port: int = Field(default=8200, ge=0, le=65535, description="HTTP port")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    @model_validator(mode="before")
    @classmethod
    def _path_implies_filesystem(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("storage_path") and not data.get("storage_backend"):
            return {**data, "storage_backend": "filesystem"}
        return data

    @field_validator("lease_duration_seconds", mode="before")
    @classmethod
    def _parse_lease_duration(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return format_seconds(parse_duration(value))
            except InvalidDurationError as exc:
                raise ValueError(str(exc)) from exc
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _require_path_for_filesystem(self) -> "IssuerConfig":
        if self.storage_backend == "filesystem" and self.storage_path is None:
            raise ValueError("storage_path is required for the filesystem backend")
        return self

    @property
    def lease_duration(self) -> datetime.timedelta:
        return datetime.timedelta(seconds=self.lease_duration_seconds)

    @classmethod
    def from_env(cls, **overrides: object) -> "IssuerConfig":
        """Build a config from the environment plus *overrides*.

        Overrides whose value is None are ignored, so unset command-line
        options fall through to ``JWT_ISSUER_*`` variables.
        """
        return cls(**{name: value for name, value in overrides.items() if value is not None})


def build_storage(config: IssuerConfig) -> Storage:
    """Return the storage backend selected by *config*.

    Raises
    ------
    ValueError
        If the filesystem backend is selected without a storage path.
    """
    if config.storage_backend == "filesystem":
        if config.storage_path is None:
            raise ValueError("storage_path is required for the filesystem backend")
        return FilesystemStorage(config.storage_path)
    return InMemoryStorage()
