"""
Interface to configuration as persisted in .yaml file.
"""
from __future__ import annotations

from contextlib import AbstractContextManager
from logging import Logger
from typing import Any

from pydantic import BaseModel, field_serializer, field_validator

from ..core.exceptions import InvalidPathError
from ..core.namespace.client import NamespaceClient
from ..core.namespace.zookeeper import CONNECT_TIMEOUT, connect
from ..core.paths import normalize_remote
from ..core.sync.options import DIR_MODE, FILE_MODE, SyncOptions
from .yaml_model import BaseYamlModel

__all__ = [
    "Config",
    "InstanceConfig",
]


class Config(BaseYamlModel):
    """
    Encapsulates configuration for use in tools.
    """

    instances: dict[str, InstanceConfig]
    """
    Mapping of instance names to configs.
    """


class InstanceConfig(BaseModel):
    """
    Encapsulates connection info and sync policy for a ZooKeeper ensemble.
    """

    servers: list[str]
    auth: str | None = None
    timeout: float = CONNECT_TIMEOUT
    server_prefix: str | None = None
    dir_mode: int = DIR_MODE
    file_mode: int = FILE_MODE

    @field_validator("servers", mode="before")
    def validate_servers(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [s.strip() for s in value.split(",") if s.strip()]

        if isinstance(value, list) and not len(value):
            raise ValueError("at least one server must be provided")

        return value

    @field_validator("server_prefix")
    def validate_server_prefix(cls, value: str | None) -> str | None:
        if value is None:
            return value

        try:
            return normalize_remote(value)
        except InvalidPathError as e:
            raise ValueError(str(e)) from None

    @field_validator("dir_mode", "file_mode", mode="before")
    def validate_mode(cls, value: Any) -> Any:
        # modes are given as octal strings, e.g. "0744"
        if isinstance(value, str):
            try:
                return int(value, 8)
            except ValueError:
                raise ValueError(f"invalid octal mode: '{value}'") from None
        return value

    @field_serializer("dir_mode", "file_mode")
    def serialize_mode(self, value: int) -> str:
        return f"0{value:o}"

    def connect(
        self, *, logger: Logger
    ) -> AbstractContextManager[NamespaceClient]:
        """
        Get context manager which connects to this instance.
        """
        return connect(
            self.servers, auth=self.auth, timeout=self.timeout, logger=logger
        )

    def sync_options(self, *, dry_run: bool = False) -> SyncOptions:
        """
        Get sync options from this instance's fields.
        """
        return SyncOptions(
            dir_mode=self.dir_mode, file_mode=self.file_mode, dry_run=dry_run
        )
