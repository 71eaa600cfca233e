"""
Pydantic configuration models for devices and interactions.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DEVICE_NAME = "Launchpad"
DEFAULT_LATENCY = 0.001


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


class DeviceConfig(BaseModel):
    """
    Which MIDI ports a Device opens.

    Explicit port ids take precedence over the device name.
    """

    input: bool = True
    output: bool = True
    device_name: str = DEFAULT_DEVICE_NAME
    input_device_id: Optional[int] = Field(default=None, ge=0)
    output_device_id: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def warn_unused_ids(self):
        """Ids for a disabled side are ignored."""
        if not self.input and self.input_device_id is not None:
            logger.warning(f"input_device_id={self.input_device_id} ignored, input is disabled")
        if not self.output and self.output_device_id is not None:
            logger.warning(f"output_device_id={self.output_device_id} ignored, output is disabled")
        return self


class InteractionConfig(BaseModel):
    """
    Settings for an Interaction and the device it creates on start.

    Attributes:
        latency: Seconds between two polls of the device; negative values are
            taken as their absolute value, 0 polls without pausing.
    """

    device_name: Optional[str] = None
    input_device_id: Optional[int] = Field(default=None, ge=0)
    output_device_id: Optional[int] = Field(default=None, ge=0)
    latency: float = DEFAULT_LATENCY

    model_config = {"frozen": True}

    @field_validator("latency", mode="before")
    @classmethod
    def absolute_latency(cls, v):
        if v is None:
            return DEFAULT_LATENCY
        return abs(float(v))

    def device_config(self) -> DeviceConfig:
        """Config for the device an Interaction creates itself (input and output)."""
        options = {"input": True, "output": True}
        if self.device_name is not None:
            options["device_name"] = self.device_name
        if self.input_device_id is not None:
            options["input_device_id"] = self.input_device_id
        if self.output_device_id is not None:
            options["output_device_id"] = self.output_device_id
        return DeviceConfig(**options)


def build_config(model: type[BaseModel], config: Optional[BaseModel], overrides: dict) -> BaseModel:
    """
    Merge keyword overrides into a config model.

    Raises:
        ConfigurationError: Invalid values or unknown options
    """
    unknown = set(overrides) - set(model.model_fields)
    if unknown:
        raise ConfigurationError(f"Unknown {model.__name__} option(s): {', '.join(sorted(unknown))}")
    base = config.model_dump() if config is not None else {}
    try:
        return model(**{**base, **overrides})
    except ValueError as e:
        raise ConfigurationError(f"Invalid {model.__name__}: {e}") from e
