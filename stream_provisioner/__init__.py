"""Ensure-ready provisioning for Kinesis data streams."""

__version__ = "0.1.0"
