"""Tests for configuration.py: LoggingConfiguration."""

import logging

import pydantic
import pytest

import configuration

# ── Helper: list of all environment variable names that the configuration
# model reads.  Used to clear stale values in tests that assert defaults. ──

ALL_CONFIGURATION_ENVIRONMENT_VARIABLE_NAMES: list[str] = [
    "CLOUD_JSON_LOGGING_LOG_LEVEL",
    "CLOUD_JSON_LOGGING_OUTPUT_STREAM",
    "CLOUD_JSON_LOGGING_SERVICE_NAME",
    "CLOUD_JSON_LOGGING_SERVICE_VERSION",
    "CLOUD_JSON_LOGGING_INCLUDE_SOURCE_LOCATION",
    "CLOUD_JSON_LOGGING_EXCEPTION_CAUSE_DEPTH_LIMIT",
    "CLOUD_JSON_LOGGING_MAXIMUM_JSON_NESTING_DEPTH",
]


def _clear_all_configuration_environment_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every CLOUD_JSON_LOGGING_* variable so the test reads only defaults."""
    for variable_name in ALL_CONFIGURATION_ENVIRONMENT_VARIABLE_NAMES:
        monkeypatch.delenv(variable_name, raising=False)


class TestLoggingConfigurationDefaults:
    """Verify that every field resolves to its documented default."""

    def test_default_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _clear_all_configuration_environment_variables(monkeypatch)
        logging_configuration = configuration.LoggingConfiguration(_env_file=None)

        assert logging_configuration.log_level == "INFO"
        assert logging_configuration.output_stream == "stdout"
        assert logging_configuration.service_name is None
        assert logging_configuration.service_version is None
        assert logging_configuration.include_source_location is True
        assert logging_configuration.exception_cause_depth_limit == 10
        assert logging_configuration.maximum_json_nesting_depth == 32

    def test_numeric_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _clear_all_configuration_environment_variables(monkeypatch)
        logging_configuration = configuration.LoggingConfiguration(_env_file=None)
        assert logging_configuration.numeric_log_level == logging.INFO


class TestLoggingConfigurationOverrides:
    """Verify that each environment variable correctly overrides the default."""

    def test_log_level_override_is_normalised(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUD_JSON_LOGGING_LOG_LEVEL", " debug ")
        logging_configuration = configuration.LoggingConfiguration(_env_file=None)
        assert logging_configuration.log_level == "DEBUG"
        assert logging_configuration.numeric_log_level == logging.DEBUG

    def test_output_stream_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUD_JSON_LOGGING_OUTPUT_STREAM", "stderr")
        logging_configuration = configuration.LoggingConfiguration(_env_file=None)
        assert logging_configuration.output_stream == "stderr"

    def test_service_context_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUD_JSON_LOGGING_SERVICE_NAME", "users-api")
        monkeypatch.setenv("CLOUD_JSON_LOGGING_SERVICE_VERSION", "1.4.2")
        logging_configuration = configuration.LoggingConfiguration(_env_file=None)
        assert logging_configuration.service_name == "users-api"
        assert logging_configuration.service_version == "1.4.2"

    def test_boolean_coercion(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUD_JSON_LOGGING_INCLUDE_SOURCE_LOCATION", "false")
        logging_configuration = configuration.LoggingConfiguration(_env_file=None)
        assert logging_configuration.include_source_location is False

    def test_type_coercion_for_integer_field(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUD_JSON_LOGGING_EXCEPTION_CAUSE_DEPTH_LIMIT", "4")
        logging_configuration = configuration.LoggingConfiguration(_env_file=None)
        assert logging_configuration.exception_cause_depth_limit == 4
        assert isinstance(logging_configuration.exception_cause_depth_limit, int)


class TestLoggingConfigurationValidation:
    """Verify that invalid values are rejected at start-up."""

    def test_unknown_log_level_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUD_JSON_LOGGING_LOG_LEVEL", "VERBOSE")
        with pytest.raises(pydantic.ValidationError):
            configuration.LoggingConfiguration(_env_file=None)

    def test_unknown_output_stream_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUD_JSON_LOGGING_OUTPUT_STREAM", "file")
        with pytest.raises(pydantic.ValidationError):
            configuration.LoggingConfiguration(_env_file=None)

    def test_depth_limit_must_be_positive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUD_JSON_LOGGING_EXCEPTION_CAUSE_DEPTH_LIMIT", "0")
        with pytest.raises(pydantic.ValidationError):
            configuration.LoggingConfiguration(_env_file=None)

    def test_nesting_depth_must_be_positive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUD_JSON_LOGGING_MAXIMUM_JSON_NESTING_DEPTH", "0")
        with pytest.raises(pydantic.ValidationError):
            configuration.LoggingConfiguration(_env_file=None)
