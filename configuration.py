"""
Logging configuration module.

Loads every configuration value from environment variables with the
prefix CLOUD_JSON_LOGGING_.  Defaults suit a container on Cloud Run or
GKE, where the logging agent reads JSON lines from standard output.  A
.env file is also supported via pydantic-settings.

The configuration is read once, by ``configure_logging``, and the
formatter built from it is never changed afterwards.
"""

import logging
import typing

import pydantic
import pydantic_settings

ACCEPTED_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingConfiguration(pydantic_settings.BaseSettings):
    """
    Centralised configuration for the Cloud Logging JSON formatter.

    Every field maps to an environment variable prefixed with
    CLOUD_JSON_LOGGING_.  For example, the field ``service_name`` is
    populated from the environment variable CLOUD_JSON_LOGGING_SERVICE_NAME.

    Configuration categories
    ------------------------
    - **Output**: log level, output stream
    - **Error Reporting**: service name and version
    - **Rendering limits**: source location, cause chain depth, payload
      nesting depth
    """

    # ── Output settings ──────────────────────────────────────────────────

    log_level: str = pydantic.Field(
        default="INFO",
        description=(
            "Minimum level of the root logger. "
            "Accepted values: DEBUG, INFO, WARNING, ERROR, CRITICAL."
        ),
    )

    output_stream: typing.Literal["stdout", "stderr"] = pydantic.Field(
        default="stdout",
        description="The standard stream the JSON lines are written to.",
    )

    # ── Error Reporting settings ─────────────────────────────────────────

    service_name: str | None = pydantic.Field(
        default=None,
        description=(
            "Name of the service, rendered as serviceContext.service on "
            "every entry. Leave unset to omit serviceContext."
        ),
    )

    service_version: str | None = pydantic.Field(
        default=None,
        description="Version of the service, rendered as serviceContext.version.",
    )

    # ── Rendering limits ─────────────────────────────────────────────────

    include_source_location: bool = pydantic.Field(
        default=True,
        description="Emit the sourceLocation object (file, line, function).",
    )

    exception_cause_depth_limit: int = pydantic.Field(
        default=10,
        ge=1,
        description=(
            "Maximum number of exceptions rendered from one cause chain, "
            "the logged exception included. Longer chains are marked as "
            "truncated."
        ),
    )

    maximum_json_nesting_depth: int = pydantic.Field(
        default=32,
        ge=1,
        description=(
            "Payload containers nested deeper than this are rendered as "
            "their string form."
        ),
    )

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env",
        env_prefix="CLOUD_JSON_LOGGING_",
    )

    @pydantic.field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        normalised = value.strip().upper()
        if normalised not in ACCEPTED_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(ACCEPTED_LOG_LEVELS)}, got {value!r}.")
        return normalised

    @property
    def numeric_log_level(self) -> int:
        """The ``logging`` module constant for ``log_level``."""
        return logging.getLevelName(self.log_level)
