"""Configuration module for stream-provisioner."""

from stream_provisioner.config.settings import ProvisionerConfig, load_config

__all__ = ["ProvisionerConfig", "load_config"]
