"""
Parameter store collaborators.

RemoteStore is the async interface the engines talk to. SsmParameterStore
implements it on top of boto3; each blocking SDK call runs in a worker
thread so several calls can be in flight on one event loop.
"""

import asyncio
import logging
from typing import List, Optional, Protocol

import boto3
from botocore.exceptions import ClientError, ProfileNotFound

from .errors import ValidationError
from .models import ParameterRecord, RemoteParameter
from .paths import normalize_namespace


DEFAULT_REGION = "us-east-1"

# Largest page size GetParametersByPath accepts
PAGE_SIZE = 10

logger = logging.getLogger("awsenv.store")


class RemoteStore(Protocol):
    """Path-addressed key/value store with plain and encrypted values."""

    async def list(self, prefix: str) -> List[RemoteParameter]:
        """Every parameter under prefix, recursively, values decrypted."""
        ...

    async def put(self, record: ParameterRecord) -> None:
        ...

    async def delete(self, name: str) -> None:
        ...


class SsmParameterStore:
    """
    AWS SSM Parameter Store backend.

    Args:
        region: AWS region (defaults to us-east-1)
        profile: AWS CLI profile name used to build the boto3 session
        client: Pre-built SSM client, mainly for tests
    """

    def __init__(
        self,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        client=None,
    ):
        self.region = region or DEFAULT_REGION
        self.profile = profile
        if client is None:
            try:
                session = boto3.Session(profile_name=profile, region_name=self.region)
                client = session.client("ssm")
            except ProfileNotFound as e:
                raise ValidationError(f"AWS CLI profile '{profile}' not found. "
                                      f"Run 'aws configure --profile {profile}' to create it.") from e
        self.client = client

    def _list_sync(self, prefix: str) -> List[RemoteParameter]:
        paginator = self.client.get_paginator("get_parameters_by_path")
        pages = paginator.paginate(
            Path=normalize_namespace(prefix) or "/",
            Recursive=True,
            WithDecryption=True,
            PaginationConfig={"PageSize": PAGE_SIZE},
        )

        parameters = []
        try:
            for page in pages:
                for item in page.get("Parameters", []):
                    parameters.append(RemoteParameter(name=item["Name"], value=item.get("Value", "")))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ParameterNotFound":
                return []
            raise

        logger.debug("Listed %d parameters under %s", len(parameters), prefix)
        return parameters

    def _put_sync(self, record: ParameterRecord) -> None:
        self.client.put_parameter(
            Name=record.path,
            Value=record.value,
            Type=record.parameter_type,
            Overwrite=record.overwrite,
            Description=record.description,
        )

    def _delete_sync(self, name: str) -> None:
        self.client.delete_parameter(Name=name)

    async def list(self, prefix: str) -> List[RemoteParameter]:
        return await asyncio.to_thread(self._list_sync, prefix)

    async def put(self, record: ParameterRecord) -> None:
        await asyncio.to_thread(self._put_sync, record)

    async def delete(self, name: str) -> None:
        await asyncio.to_thread(self._delete_sync, name)
