"""Stream readiness orchestration.

Brings a named stream to a usable state: creates it if absent, waits out
creation or a pending deletion, and reports a typed failure when the
service does not cooperate before the deadline.

    [absent]  --create-->  CREATING  -->  ACTIVE
    DELETING  -->  [absent]  --create-->  CREATING  -->  ACTIVE
    ACTIVE, UPDATING  -->  ready (no-op)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from stream_provisioner.config.settings import ProvisionerConfig
from stream_provisioner.provisioner.client import (
    StreamClient,
    StreamInUseError,
    StreamNotFoundError,
    StreamServiceError,
)
from stream_provisioner.provisioner.clock import CancellationToken, Clock, MonotonicClock
from stream_provisioner.provisioner.status import (
    Observation,
    StreamStatus,
    describe_observation,
)
from stream_provisioner.utils.logging import get_logger, stream_context
from stream_provisioner.utils.result import Err, ErrorKind, Ok, ProvisioningError, Result

logger = get_logger("provisioner.orchestrator")

# Poll result when the lookup itself failed; never matches a target
_UNKNOWN = object()


@dataclass
class ProvisioningOutcome:
    """Success value of an ensure-ready call."""

    stream: str
    status: StreamStatus
    created: bool = False
    polls: int = 0
    elapsed_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "stream": self.stream,
            "status": self.status.value,
            "created": self.created,
            "polls": self.polls,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }


@dataclass
class _Attempt:
    """Bookkeeping for a single ensure-ready call."""

    stream: str
    started_at: float
    deadline: float
    cancellation: Optional[CancellationToken] = None
    created: bool = False
    polls: int = 0


class StreamReadinessOrchestrator:
    """
    Ensures streams exist and are ready to use.

    The orchestrator holds no per-stream state; the external service is
    queried on every check. Concurrent callers for the same stream are not
    deduplicated here.
    """

    def __init__(
        self,
        client: StreamClient,
        ready_timeout: float = 180.0,
        poll_interval: float = 10.0,
        accept_updating: bool = True,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            client: Capability to describe and create streams
            ready_timeout: Seconds before a call gives up waiting
            poll_interval: Seconds between status polls
            accept_updating: Treat UPDATING as ready without waiting for ACTIVE
            clock: Time source (defaults to the monotonic wall clock)
        """
        if ready_timeout <= 0:
            raise ValueError(f"ready_timeout must be positive, got {ready_timeout}")
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")

        self._client = client
        self.ready_timeout = ready_timeout
        self.poll_interval = poll_interval
        self.accept_updating = accept_updating
        self._clock = clock or MonotonicClock()

    @classmethod
    def from_config(
        cls,
        config: ProvisionerConfig,
        client: StreamClient,
        clock: Optional[Clock] = None,
    ) -> "StreamReadinessOrchestrator":
        return cls(
            client,
            ready_timeout=config.timeouts.ready_timeout,
            poll_interval=config.timeouts.poll_interval,
            accept_updating=config.accept_updating,
            clock=clock,
        )

    def ensure_ready(
        self,
        stream: str,
        shard_count: int,
        cancellation: Optional[CancellationToken] = None,
    ) -> Result[ProvisioningOutcome, ProvisioningError]:
        """
        Create the stream if needed and wait until it is ready.

        Args:
            stream: Stream name
            shard_count: Shards to create the stream with, if it is created
            cancellation: Optional token that aborts any wait in progress

        Returns:
            Ok(ProvisioningOutcome) once the stream is ACTIVE (or UPDATING,
            when accepted), otherwise Err(ProvisioningError)

        Raises:
            ValueError: If the stream name is empty or shard_count < 1
        """
        if not stream:
            raise ValueError("stream name must not be empty")
        if shard_count < 1:
            raise ValueError(f"shard_count must be at least 1, got {shard_count}")

        now = self._clock.monotonic()
        attempt = _Attempt(
            stream=stream,
            started_at=now,
            deadline=now + self.ready_timeout,
            cancellation=cancellation,
        )

        with stream_context(stream):
            result = self._ensure_ready(attempt, shard_count)
            if result.is_ok():
                logger.info("stream_ready", **result.unwrap().to_dict())
            else:
                error = result.unwrap_err()
                logger.warning(
                    "stream_not_ready",
                    kind=error.kind.value,
                    status=error.status,
                    message=error.message,
                )
            return result

    def describe_status(self, stream: str) -> Result[Observation, ProvisioningError]:
        """
        Look up the current status of a stream.

        Returns:
            Ok(StreamStatus), Ok(raw string) for an unrecognized status,
            Ok(None) if the stream does not exist, or Err(LOOKUP_FAILURE)
        """
        if not stream:
            raise ValueError("stream name must not be empty")
        with stream_context(stream):
            return self._lookup(stream)

    def _ensure_ready(
        self,
        attempt: _Attempt,
        shard_count: int,
    ) -> Result[ProvisioningOutcome, ProvisioningError]:
        lookup = self._lookup(attempt.stream)
        if lookup.is_err():
            return lookup
        observed = lookup.unwrap()

        if observed is None:
            created = self._create(attempt, shard_count)
            if created.is_err():
                return created
        elif isinstance(observed, StreamStatus) and observed.is_ready(self.accept_updating):
            logger.info("stream_already_ready", status=observed.value)
            return Ok(self._outcome(attempt, observed))
        elif observed == StreamStatus.UPDATING:
            logger.info("stream_updating_awaiting_active")
        elif observed == StreamStatus.CREATING:
            logger.info("stream_being_created")
        elif observed == StreamStatus.DELETING:
            logger.info("stream_being_deleted")
            recreated = self._recreate_after_delete(attempt, shard_count)
            if recreated.is_err():
                return recreated
        else:
            return Err(ProvisioningError(
                kind=ErrorKind.INVALID_STATE,
                stream=attempt.stream,
                message=f"Illegal stream state: {observed}",
                status=str(observed),
            ))

        waited = self._wait_for(attempt, StreamStatus.ACTIVE)
        if waited.is_err():
            return waited

        return self._verify_active(attempt)

    def _recreate_after_delete(
        self,
        attempt: _Attempt,
        shard_count: int,
    ) -> Result[None, ProvisioningError]:
        waited = self._wait_for(attempt, None)
        if waited.is_err():
            return waited

        lookup = self._lookup(attempt.stream)
        if lookup.is_err():
            return lookup
        if lookup.unwrap() is not None:
            return Err(ProvisioningError(
                kind=ErrorKind.DELETE_TIMEOUT,
                stream=attempt.stream,
                message=f"Timed out waiting for stream {attempt.stream} to delete",
                status=describe_observation(lookup.unwrap()),
            ))

        return self._create(attempt, shard_count)

    def _verify_active(self, attempt: _Attempt) -> Result[ProvisioningOutcome, ProvisioningError]:
        lookup = self._lookup(attempt.stream)
        if lookup.is_err():
            return lookup

        observed = lookup.unwrap()
        if observed != StreamStatus.ACTIVE:
            return Err(ProvisioningError(
                kind=ErrorKind.ACTIVATION_TIMEOUT,
                stream=attempt.stream,
                message=(
                    f"Stream {attempt.stream} did not become active "
                    f"in {self.ready_timeout:g}s"
                ),
                status=describe_observation(observed),
            ))

        return Ok(self._outcome(attempt, StreamStatus.ACTIVE))

    def _create(self, attempt: _Attempt, shard_count: int) -> Result[None, ProvisioningError]:
        if attempt.cancellation is not None and attempt.cancellation.cancelled:
            logger.info("create_skipped_cancelled", shard_count=shard_count)
            return Err(self._cancelled(attempt))

        try:
            self._client.create(attempt.stream, shard_count)
        except StreamInUseError:
            # Another caller won the race; its stream is what we wait on
            logger.info("stream_create_absorbed", shard_count=shard_count)
        except StreamServiceError as e:
            return Err(ProvisioningError(
                kind=ErrorKind.CREATE_FAILURE,
                stream=attempt.stream,
                message=f"Stream {attempt.stream} could not be created",
                cause=e,
            ))
        else:
            logger.info("stream_create_requested", shard_count=shard_count)
            attempt.created = True

        return Ok(None)

    def _cancelled(self, attempt: _Attempt) -> ProvisioningError:
        return ProvisioningError(
            kind=ErrorKind.CANCELLED,
            stream=attempt.stream,
            message=f"Wait for stream {attempt.stream} was cancelled",
        )

    def _wait_for(
        self,
        attempt: _Attempt,
        target: Optional[StreamStatus],
    ) -> Result[None, ProvisioningError]:
        """
        Poll until ``target`` is observed or the deadline passes.

        A target of None waits for the stream to disappear. Reaching the
        deadline is not an error here; callers re-check the status.
        """
        while self._clock.monotonic() < attempt.deadline:
            if not self._clock.sleep(self.poll_interval, attempt.cancellation):
                logger.info("wait_cancelled", target=describe_observation(target))
                return Err(self._cancelled(attempt))

            attempt.polls += 1
            observed = self._poll(attempt.stream)
            if observed is not _UNKNOWN and observed == target:
                return Ok(None)

        logger.debug("wait_deadline_reached", target=describe_observation(target))
        return Ok(None)

    def _poll(self, stream: str) -> Any:
        """Tolerant status query used inside wait loops."""
        try:
            raw = self._client.describe(stream)
        except StreamNotFoundError:
            logger.debug("stream_polled", status="ABSENT")
            return None
        except StreamServiceError as e:
            logger.debug("poll_lookup_failed", error=str(e))
            return _UNKNOWN

        observed = StreamStatus.parse(raw) or raw
        logger.debug("stream_polled", status=describe_observation(observed))
        return observed

    def _lookup(self, stream: str) -> Result[Observation, ProvisioningError]:
        """Blocking status query used at decision points."""
        try:
            raw = self._client.describe(stream)
        except StreamNotFoundError:
            return Ok(None)
        except StreamServiceError as e:
            return Err(ProvisioningError(
                kind=ErrorKind.LOOKUP_FAILURE,
                stream=stream,
                message=f"State of the stream {stream} could not be found",
                cause=e,
            ))

        return Ok(StreamStatus.parse(raw) or raw)

    def _outcome(self, attempt: _Attempt, status: StreamStatus) -> ProvisioningOutcome:
        return ProvisioningOutcome(
            stream=attempt.stream,
            status=status,
            created=attempt.created,
            polls=attempt.polls,
            elapsed_seconds=self._clock.monotonic() - attempt.started_at,
        )
