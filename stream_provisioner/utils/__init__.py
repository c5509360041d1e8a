"""Utility modules for stream-provisioner."""

from stream_provisioner.utils.logging import (
    configure_logging,
    get_correlation_id,
    get_logger,
    stream_context,
)
from stream_provisioner.utils.result import (
    ConfigError,
    Err,
    ErrorKind,
    ExitCode,
    Ok,
    ProvisioningError,
    Result,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_correlation_id",
    "stream_context",
    # Result
    "Ok",
    "Err",
    "Result",
    "ErrorKind",
    "ExitCode",
    "ProvisioningError",
    "ConfigError",
]
