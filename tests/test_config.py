"""Tests for configuration models."""

import pytest

from launchgrid.config import (
    DEFAULT_DEVICE_NAME,
    DEFAULT_LATENCY,
    ConfigurationError,
    DeviceConfig,
    InteractionConfig,
    build_config,
)


class TestDeviceConfig:
    def test_defaults(self):
        config = DeviceConfig()
        assert config.input and config.output
        assert config.device_name == DEFAULT_DEVICE_NAME
        assert config.input_device_id is None and config.output_device_id is None

    def test_negative_id_rejected(self):
        with pytest.raises(ValueError):
            DeviceConfig(input_device_id=-1)

    def test_frozen(self):
        with pytest.raises(ValueError):
            DeviceConfig().device_name = "Other"

    def test_unused_id_warns(self, caplog):
        DeviceConfig(input=False, input_device_id=2)
        assert "input_device_id=2 ignored" in caplog.text


class TestInteractionConfig:
    @pytest.mark.parametrize("value,expected", [(None, DEFAULT_LATENCY), (0, 0.0), (0.5, 0.5), (-2, 2.0)])
    def test_latency(self, value, expected):
        assert InteractionConfig(latency=value).latency == expected

    def test_device_config_enables_both_sides(self):
        device_config = InteractionConfig().device_config()
        assert device_config == DeviceConfig()

    def test_device_config_passes_selection(self):
        device_config = InteractionConfig(device_name="Launchpad S", input_device_id=3, output_device_id=4).device_config()
        assert device_config.device_name == "Launchpad S"
        assert (device_config.input_device_id, device_config.output_device_id) == (3, 4)


class TestBuildConfig:
    def test_overrides_win(self):
        config = build_config(InteractionConfig, InteractionConfig(latency=1, device_name="A"), {"latency": 2})
        assert (config.latency, config.device_name) == (2.0, "A")

    def test_no_config(self):
        assert build_config(DeviceConfig, None, {}) == DeviceConfig()

    def test_unknown_option(self):
        with pytest.raises(ConfigurationError, match="colour"):
            build_config(DeviceConfig, None, {"colour": "red"})

    def test_invalid_value(self):
        with pytest.raises(ConfigurationError):
            build_config(DeviceConfig, None, {"output_device_id": -4})
