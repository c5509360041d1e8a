"""Centralized configuration for the stream provisioner.

Timeouts and polling cadence are explicit values here rather than module
constants, so tests and callers can shorten them. Configuration can be
loaded from YAML and is validated before use.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from stream_provisioner.utils.result import ConfigError, Err, Ok, Result

CONFIG_FILENAME = "provisioner.yaml"

ENV_ENDPOINT_URL = "STREAM_PROVISIONER_ENDPOINT_URL"
ENV_REGION = "AWS_REGION"


@dataclass
class TimeoutConfig:
    """Deadline and polling settings for one ensure-ready call."""

    ready_timeout: float = 180.0
    poll_interval: float = 10.0


@dataclass
class AwsConfig:
    """Connection settings for the Kinesis client."""

    region: Optional[str] = None
    endpoint_url: Optional[str] = None  # e.g. LocalStack
    profile: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "info"
    format: str = "json"


@dataclass
class ProvisionerConfig:
    """
    Complete provisioner configuration.

    This is the single source of truth for all configuration values.
    """

    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    aws: AwsConfig = field(default_factory=AwsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    default_shard_count: int = 1

    # An UPDATING stream is treated as ready without waiting for ACTIVE
    accept_updating: bool = True

    @classmethod
    def from_yaml(cls, path: Path) -> Result["ProvisionerConfig", ConfigError]:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Result with loaded config or error
        """
        path = Path(path)

        if not path.exists():
            return Err(ConfigError(
                field="path",
                message=f"Configuration file not found: {path}",
            ))

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            return Err(ConfigError(
                field="yaml",
                message=f"Failed to parse YAML: {e}",
            ))
        except OSError as e:
            return Err(ConfigError(
                field="file",
                message=f"Failed to read config file: {e}",
            ))

        if not isinstance(data, dict):
            return Err(ConfigError(
                field="yaml",
                message="Top level of configuration must be a mapping",
            ))

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result["ProvisionerConfig", ConfigError]:
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Result with loaded config or error
        """
        accept_updating = data.get("accept_updating", True)
        if not isinstance(accept_updating, bool):
            return Err(ConfigError(
                field="accept_updating",
                message=f"Must be true or false, got {accept_updating!r}",
            ))

        try:
            timeouts_data = data.get("timeouts", {}) or {}
            timeouts = TimeoutConfig(
                ready_timeout=float(timeouts_data.get("ready_timeout", 180.0)),
                poll_interval=float(timeouts_data.get("poll_interval", 10.0)),
            )

            aws_data = data.get("aws", {}) or {}
            aws = AwsConfig(
                region=aws_data.get("region"),
                endpoint_url=aws_data.get("endpoint_url"),
                profile=aws_data.get("profile"),
            )

            logging_data = data.get("logging", {}) or {}
            logging_config = LoggingConfig(
                level=logging_data.get("level", "info"),
                format=logging_data.get("format", "json"),
            )

            config = cls(
                timeouts=timeouts,
                aws=aws,
                logging=logging_config,
                default_shard_count=int(data.get("default_shard_count", 1)),
                accept_updating=accept_updating,
            )
        except (TypeError, ValueError, AttributeError) as e:
            return Err(ConfigError(
                field="unknown",
                message=f"Failed to parse configuration: {e}",
            ))

        return Ok(config)

    def validate(self) -> Result[None, ConfigError]:
        """
        Validate configuration values.

        Returns:
            Result indicating success or validation error
        """
        if self.timeouts.ready_timeout <= 0:
            return Err(ConfigError(
                field="timeouts.ready_timeout",
                message=f"Must be positive, got {self.timeouts.ready_timeout}",
            ))
        if self.timeouts.poll_interval <= 0:
            return Err(ConfigError(
                field="timeouts.poll_interval",
                message=f"Must be positive, got {self.timeouts.poll_interval}",
            ))
        if self.timeouts.poll_interval > self.timeouts.ready_timeout:
            return Err(ConfigError(
                field="timeouts.poll_interval",
                message=(
                    f"Must not exceed ready_timeout ({self.timeouts.ready_timeout}), "
                    f"got {self.timeouts.poll_interval}"
                ),
            ))

        if self.default_shard_count < 1:
            return Err(ConfigError(
                field="default_shard_count",
                message=f"Must be at least 1, got {self.default_shard_count}",
            ))

        if self.logging.format not in ("json", "text"):
            return Err(ConfigError(
                field="logging.format",
                message=f"Must be 'json' or 'text', got {self.logging.format!r}",
            ))

        return Ok(None)

    def with_overrides(
        self,
        ready_timeout: float = None,
        poll_interval: float = None,
        region: str = None,
        endpoint_url: str = None,
        profile: str = None,
        accept_updating: bool = None,
    ) -> "ProvisionerConfig":
        """
        Return a new config with the given values replaced.

        Arguments left as None keep the current value.
        """
        timeouts = replace(
            self.timeouts,
            ready_timeout=ready_timeout if ready_timeout is not None else self.timeouts.ready_timeout,
            poll_interval=poll_interval if poll_interval is not None else self.timeouts.poll_interval,
        )
        aws = replace(
            self.aws,
            region=region or self.aws.region,
            endpoint_url=endpoint_url or self.aws.endpoint_url,
            profile=profile or self.aws.profile,
        )
        return replace(
            self,
            timeouts=timeouts,
            aws=aws,
            accept_updating=(
                accept_updating if accept_updating is not None else self.accept_updating
            ),
        )


def load_config(config_dir: Path = None) -> Result[ProvisionerConfig, ConfigError]:
    """
    Load configuration from the standard location.

    Loads config/provisioner.yaml if present, then overlays connection
    settings from the environment.

    Args:
        config_dir: Configuration directory (defaults to ./config)

    Returns:
        Result with loaded config or error
    """
    if config_dir is None:
        config_dir = Path("./config")

    config_path = Path(config_dir) / CONFIG_FILENAME
    if config_path.exists():
        result = ProvisionerConfig.from_yaml(config_path)
        if result.is_err():
            return result
        config = result.unwrap()
    else:
        config = ProvisionerConfig()

    config = config.with_overrides(
        region=config.aws.region or get_env_region(),
        endpoint_url=config.aws.endpoint_url or get_env_endpoint_url(),
    )

    validation_result = config.validate()
    if validation_result.is_err():
        return Err(validation_result.unwrap_err())

    return Ok(config)


def get_env_endpoint_url() -> Optional[str]:
    """Get a Kinesis endpoint override (e.g. LocalStack) from environment."""
    return os.environ.get(ENV_ENDPOINT_URL)


def get_env_region() -> Optional[str]:
    """Get the AWS region from environment."""
    return os.environ.get(ENV_REGION) or os.environ.get("AWS_DEFAULT_REGION")
