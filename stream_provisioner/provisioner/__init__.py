"""Stream provisioning and readiness module.

Given a stream name and shard count, make sure the stream exists and is
ready to use:

    absent   -> create -> poll until ACTIVE
    CREATING -> poll until ACTIVE
    DELETING -> poll until gone -> create -> poll until ACTIVE
    ACTIVE / UPDATING -> ready

Failures are returned as ProvisioningError values whose kind tells the
caller whether to wait longer, alert or abort.
"""

from stream_provisioner.provisioner.client import (
    KinesisStreamClient,
    StreamClient,
    StreamClientError,
    StreamInUseError,
    StreamNotFoundError,
    StreamServiceError,
    is_valid_stream_name,
)
from stream_provisioner.provisioner.clock import (
    CancellationToken,
    Clock,
    MonotonicClock,
)
from stream_provisioner.provisioner.orchestrator import (
    ProvisioningOutcome,
    StreamReadinessOrchestrator,
)
from stream_provisioner.provisioner.status import (
    Observation,
    StreamStatus,
    describe_observation,
)

__all__ = [
    # Status
    "StreamStatus",
    "Observation",
    "describe_observation",
    # Client
    "StreamClient",
    "KinesisStreamClient",
    "StreamClientError",
    "StreamNotFoundError",
    "StreamInUseError",
    "StreamServiceError",
    "is_valid_stream_name",
    # Clock
    "Clock",
    "MonotonicClock",
    "CancellationToken",
    # Orchestrator
    "StreamReadinessOrchestrator",
    "ProvisioningOutcome",
]
