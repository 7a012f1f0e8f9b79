"""
Unit tests for alpacabridge configuration system.

Tests RequestOptions/ClientConfig validation, YAML loading, and
environment variable overrides.
"""

import os
import tempfile
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from alpacabridge.config import (
    ClientConfig,
    DeviceEntry,
    RequestOptions,
    get_config_paths,
    load_config,
)
from alpacabridge.exceptions import ConfigurationError


@pytest.fixture
def no_config_files(clean_env):
    """No config file on the search path and no env overrides."""
    clean_env.setattr("alpacabridge.config.get_config_paths", lambda: [])
    return clean_env


def write_yaml(data) -> str:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(data, f)
        return f.name


class TestRequestOptions:
    """Tests for RequestOptions model."""

    def test_default_values(self) -> None:
        """Test RequestOptions defaults (seconds)."""
        options = RequestOptions()
        assert options.timeout == 10.0
        assert options.max_retries == 2
        assert options.retry_delay == 1.0
        assert options.retry_unknown is False
        assert options.max_attempts == 3

    def test_timeout_must_be_positive(self) -> None:
        RequestOptions(timeout=0.1)
        with pytest.raises(ValueError):
            RequestOptions(timeout=0)
        with pytest.raises(ValueError):
            RequestOptions(timeout=-1.0)

    def test_retry_bounds(self) -> None:
        RequestOptions(max_retries=0, retry_delay=0.0)
        with pytest.raises(ValueError):
            RequestOptions(max_retries=-1)
        with pytest.raises(ValueError):
            RequestOptions(retry_delay=-0.5)

    def test_frozen(self) -> None:
        """Test options are immutable; overrides are copies."""
        options = RequestOptions()
        with pytest.raises(ValidationError):
            options.timeout = 1.0

        override = options.model_copy(update={"max_retries": 0})
        assert override.max_retries == 0
        assert options.max_retries == 2


class TestDeviceEntry:
    """Tests for DeviceEntry model."""

    def test_device_type_normalized(self) -> None:
        entry = DeviceEntry(device_type=" Telescope ")
        assert entry.device_type == "telescope"
        assert entry.port == 11111
        assert entry.address == "localhost"

    def test_port_range(self) -> None:
        DeviceEntry(device_type="camera", port=1)
        DeviceEntry(device_type="camera", port=65535)
        with pytest.raises(ValueError):
            DeviceEntry(device_type="camera", port=0)
        with pytest.raises(ValueError):
            DeviceEntry(device_type="camera", port=65536)

    def test_negative_device_number(self) -> None:
        with pytest.raises(ValueError):
            DeviceEntry(device_type="camera", device_number=-1)


class TestConfigPaths:
    """Tests for config file search paths."""

    def test_search_order(self) -> None:
        paths = get_config_paths()
        assert paths[0] == Path.cwd() / "alpacabridge.yaml"
        assert Path.home() / ".config" / "alpacabridge" / "config.yaml" in paths
        assert paths[-1] == Path("/etc/alpacabridge/config.yaml")


class TestLoadConfig:
    """Tests for configuration loading."""

    def test_load_default_config(self, no_config_files) -> None:
        """Test loading config with no file returns defaults."""
        config = load_config()
        assert isinstance(config, ClientConfig)
        assert config.request_options.timeout == 10.0
        assert config.log_requests is False
        assert config.coerce_values is False
        assert config.devices == []

    def test_load_from_yaml_file(self, no_config_files) -> None:
        """Test loading config from YAML file."""
        temp_path = write_yaml({
            "request_options": {"timeout": 3.5, "max_retries": 0},
            "log_requests": True,
            "devices": [
                {"name": "Main mount", "device_type": "Telescope", "address": "10.0.0.5"},
            ],
        })

        try:
            config = load_config(temp_path)
            assert config.request_options.timeout == 3.5
            assert config.request_options.max_retries == 0
            # Defaults still applied
            assert config.request_options.retry_delay == 1.0
            assert config.log_requests is True
            assert config.devices[0].device_type == "telescope"
            assert config.devices[0].address == "10.0.0.5"
        finally:
            os.unlink(temp_path)

    def test_load_empty_file_gives_defaults(self, no_config_files, tmp_path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == ClientConfig()

    def test_load_nonexistent_file_raises_error(self, no_config_files) -> None:
        """Test loading nonexistent file raises ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config("/nonexistent/path/config.yaml")
        assert "not found" in str(exc_info.value)

    def test_load_invalid_yaml_raises_error(self, no_config_files) -> None:
        """Test loading invalid YAML raises ConfigurationError."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("invalid: yaml: content: [")
            temp_path = f.name

        try:
            with pytest.raises(ConfigurationError) as exc_info:
                load_config(temp_path)
            assert "Invalid YAML" in str(exc_info.value)
        finally:
            os.unlink(temp_path)

    def test_load_non_mapping_raises_error(self, no_config_files, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_load_invalid_config_raises_error(self, no_config_files) -> None:
        """Test loading invalid config values raises ConfigurationError."""
        temp_path = write_yaml({"request_options": {"timeout": -5}})

        try:
            with pytest.raises(ConfigurationError) as exc_info:
                load_config(temp_path)
            assert "validation failed" in str(exc_info.value)
            assert exc_info.value.config_file == temp_path
        finally:
            os.unlink(temp_path)

    def test_search_path_used_when_no_path_given(self, clean_env, tmp_path) -> None:
        path = tmp_path / "alpacabridge.yaml"
        path.write_text("coerce_values: true\n")
        clean_env.setattr("alpacabridge.config.get_config_paths", lambda: [tmp_path / "missing.yaml", path])

        assert load_config().coerce_values is True


class TestEnvironmentOverrides:
    """Tests for environment variable overrides."""

    def test_env_override_request_options(self, no_config_files) -> None:
        no_config_files.setenv("ALPACABRIDGE_TIMEOUT", "2.5")
        no_config_files.setenv("ALPACABRIDGE_MAX_RETRIES", "5")
        no_config_files.setenv("ALPACABRIDGE_RETRY_DELAY", "0")

        options = load_config().request_options
        assert options.timeout == 2.5
        assert options.max_retries == 5
        assert options.retry_delay == 0.0

    def test_env_override_booleans(self, no_config_files) -> None:
        no_config_files.setenv("ALPACABRIDGE_LOG_REQUESTS", "yes")
        no_config_files.setenv("ALPACABRIDGE_COERCE_VALUES", "1")
        no_config_files.setenv("ALPACABRIDGE_RETRY_UNKNOWN", "false")

        config = load_config()
        assert config.log_requests is True
        assert config.coerce_values is True
        assert config.request_options.retry_unknown is False

    def test_env_override_wins_over_file(self, no_config_files) -> None:
        temp_path = write_yaml({"request_options": {"timeout": 3.0, "max_retries": 1}})
        no_config_files.setenv("ALPACABRIDGE_TIMEOUT", "7")

        try:
            config = load_config(temp_path)
            assert config.request_options.timeout == 7.0
            assert config.request_options.max_retries == 1
        finally:
            os.unlink(temp_path)

    def test_env_override_invalid_number(self, no_config_files) -> None:
        no_config_files.setenv("ALPACABRIDGE_MAX_RETRIES", "lots")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert exc_info.value.config_key == "max_retries"
