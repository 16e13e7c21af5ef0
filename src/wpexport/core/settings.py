"""
Centralized settings for wp-export.

Manifesto:
    One validated settings object, read from ``WPEXPORT_*`` environment
    variables and ``.env``, replaces the prompts and shell variables each
    export step used to parse on its own.  The CLI overlays its options on
    top of this object with :meth:`ExportSettings.model_copy`, so library
    code only ever sees the resolved values.

Examples:
    >>> settings = ExportSettings(channel="remote", ssh_host="client.pressable")
    >>> settings.is_remote
    True

    $ WPEXPORT_CHANNEL=remote WPEXPORT_SSH_HOST=staging wp-export run

Tags:
    wp-export, configuration, settings, pydantic, environment

Doc-Types:
    api-reference
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wpexport.core.errors import InvalidConfigError, MissingConfigError


LOG_FORMATS = ("console", "json")


class ChannelKind(str, Enum):
    """Where wp-cli commands run."""

    LOCAL = "local"
    REMOTE = "remote"


class ExportSettings(BaseSettings):
    """wp-export configuration.

    Fields
    ──────
    channel           : local (subprocess) or remote (ssh session)
    ssh_host          : ssh alias or user@host, required for remote
    wp_path           : WordPress root on the target machine
    base_domain       : domain used to build URLs in the workbook
    command_timeout   : per-invocation timeout, seconds
    export_users      : also export authors with per-author record counts
    """

    model_config = SettingsConfigDict(
        env_prefix="WPEXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Backend ──────────────────────────────────────────────────
    channel: ChannelKind = Field(default=ChannelKind.LOCAL)
    ssh_host: str | None = Field(default=None)
    wp_path: str | None = Field(default=None)
    wp_binary: str = Field(default="wp")
    allow_root: bool = Field(default=False)

    # ── Session limits ───────────────────────────────────────────
    connect_timeout: int = Field(default=30, ge=1)
    keepalive_interval: int = Field(default=5, ge=1)
    keepalive_count_max: int = Field(default=3, ge=1)
    command_timeout: float = Field(default=300.0, gt=0)

    # ── Export scope ─────────────────────────────────────────────
    base_domain: str = Field(default="example.com")
    export_users: bool = Field(default=True)
    remote_author_counts: bool = Field(default=False)
    extra_categories: list[str] = Field(default_factory=list)
    skip_discovery: bool = Field(default=False)

    # ── Output ───────────────────────────────────────────────────
    output_dir: Path = Field(default=Path("."))
    write_xlsx: bool = Field(default=True)
    keep_intermediate: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("base_domain")
    @classmethod
    def _strip_scheme(cls, value: str) -> str:
        value = value.strip()
        for prefix in ("https://", "http://"):
            if value.startswith(prefix):
                value = value[len(prefix):]
        return value.rstrip("/") or "example.com"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_FORMATS:
            raise InvalidConfigError("log_format", value, f"log_format must be one of {LOG_FORMATS}")
        return value

    @model_validator(mode="after")
    def _require_host_for_remote(self) -> ExportSettings:
        if self.channel == ChannelKind.REMOTE and not self.ssh_host:
            raise MissingConfigError("ssh_host", "Remote channel requires WPEXPORT_SSH_HOST or --host")
        return self

    # ── Derived properties ───────────────────────────────────────

    @property
    def is_remote(self) -> bool:
        return self.channel == ChannelKind.REMOTE


def get_settings(**overrides) -> ExportSettings:
    """Build settings from the environment, applying non-None overrides.

    Overrides are validated like environment values, so CLI input goes
    through the same checks.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    return ExportSettings(**values)
