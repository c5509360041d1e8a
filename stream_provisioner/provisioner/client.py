"""Stream-management client capability and its Kinesis adapter."""

from __future__ import annotations

import re
from typing import Any, Optional, Protocol, runtime_checkable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from stream_provisioner.config.settings import AwsConfig
from stream_provisioner.utils.logging import get_logger

logger = get_logger("provisioner.client")

# Kinesis stream naming rules
STREAM_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]{1,128}$")


class StreamClientError(Exception):
    """Base error raised at the client boundary."""

    def __init__(self, stream: str, message: str) -> None:
        self.stream = stream
        super().__init__(message)


class StreamNotFoundError(StreamClientError):
    """The stream does not exist."""


class StreamInUseError(StreamClientError):
    """A create was rejected because the stream already exists."""


class StreamServiceError(StreamClientError):
    """The service or the transport could not answer the request."""


@runtime_checkable
class StreamClient(Protocol):
    """Describe and create streams against an external service."""

    def describe(self, name: str) -> str:
        """Return the raw status of the stream.

        Raises StreamNotFoundError or StreamServiceError.
        """
        ...

    def create(self, name: str, shard_count: int) -> None:
        """Request creation of the stream.

        Raises StreamInUseError or StreamServiceError.
        """
        ...


class KinesisStreamClient:
    """
    StreamClient backed by the boto3 Kinesis client.

    Works against AWS or any Kinesis-compatible endpoint such as LocalStack.
    """

    def __init__(self, kinesis_client: Any) -> None:
        """
        Initialize the adapter.

        Args:
            kinesis_client: A boto3 ``kinesis`` client with describe and
                create privileges
        """
        self._client = kinesis_client

    @classmethod
    def from_config(cls, aws: AwsConfig) -> "KinesisStreamClient":
        """Build the adapter from connection settings."""
        session = boto3.session.Session(
            profile_name=aws.profile,
            region_name=aws.region,
        )
        client_kwargs: dict[str, Any] = {}
        if aws.endpoint_url:
            client_kwargs["endpoint_url"] = aws.endpoint_url

        logger.debug(
            "kinesis_client_created",
            region=session.region_name,
            endpoint_url=aws.endpoint_url,
        )
        return cls(session.client("kinesis", **client_kwargs))

    def describe(self, name: str) -> str:
        try:
            response = self._client.describe_stream_summary(StreamName=name)
        except ClientError as e:
            code = _error_code(e)
            if code == "ResourceNotFoundException":
                raise StreamNotFoundError(name, f"Stream {name} does not exist") from e
            raise StreamServiceError(
                name, f"State of the stream {name} could not be found: {code}"
            ) from e
        except BotoCoreError as e:
            raise StreamServiceError(
                name, f"State of the stream {name} could not be found: {e}"
            ) from e

        return response["StreamDescriptionSummary"]["StreamStatus"]

    def create(self, name: str, shard_count: int) -> None:
        try:
            self._client.create_stream(StreamName=name, ShardCount=shard_count)
        except ClientError as e:
            code = _error_code(e)
            if code == "ResourceInUseException":
                raise StreamInUseError(name, f"Stream {name} already exists") from e
            raise StreamServiceError(
                name, f"Stream {name} could not be created: {code}"
            ) from e
        except BotoCoreError as e:
            raise StreamServiceError(
                name, f"Stream {name} could not be created: {e}"
            ) from e


def _error_code(error: ClientError) -> Optional[str]:
    return error.response.get("Error", {}).get("Code")


def is_valid_stream_name(name: str) -> bool:
    """Check a name against the Kinesis naming rules."""
    return bool(name) and STREAM_NAME_PATTERN.match(name) is not None
