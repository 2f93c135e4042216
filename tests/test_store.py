"""
Tests for the SSM-backed store, using botocore's Stubber.
"""

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from awsenv.core.errors import ErrorKind, ValidationError, classify_error
from awsenv.core.models import ParameterRecord, RemoteParameter
from awsenv.core.store import PAGE_SIZE, SsmParameterStore


@pytest.fixture
def ssm_client():
    return boto3.client(
        "ssm",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(ssm_client):
    with Stubber(ssm_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


def list_params(token=None):
    params = {
        "Path": "/test/app",
        "Recursive": True,
        "WithDecryption": True,
        "MaxResults": PAGE_SIZE,
    }
    if token:
        params["NextToken"] = token
    return params


class TestList:
    """Test recursive, paginated listing."""

    @pytest.mark.asyncio
    async def test_paginated(self, ssm_client, stubber):
        """Every page is collected."""
        stubber.add_response(
            "get_parameters_by_path",
            {
                "Parameters": [{"Name": "/test/app/A", "Type": "String", "Value": "1"}],
                "NextToken": "page-2",
            },
            list_params(),
        )
        stubber.add_response(
            "get_parameters_by_path",
            {"Parameters": [{"Name": "/test/app/nested/B", "Type": "SecureString", "Value": "s3cr3t"}]},
            list_params("page-2"),
        )

        store = SsmParameterStore(client=ssm_client)
        assert await store.list("/test/app/") == [
            RemoteParameter("/test/app/A", "1"),
            RemoteParameter("/test/app/nested/B", "s3cr3t"),
        ]

    @pytest.mark.asyncio
    async def test_not_found_is_empty(self, ssm_client, stubber):
        """A missing path lists as empty."""
        stubber.add_client_error("get_parameters_by_path", service_error_code="ParameterNotFound")
        store = SsmParameterStore(client=ssm_client)
        assert await store.list("/test/app") == []

    @pytest.mark.asyncio
    async def test_denied_propagates(self, ssm_client, stubber):
        """Other errors reach the caller unchanged."""
        stubber.add_client_error(
            "get_parameters_by_path",
            service_error_code="AccessDeniedException",
            service_message="not authorized",
            http_status_code=400,
        )
        store = SsmParameterStore(client=ssm_client)
        with pytest.raises(ClientError) as excinfo:
            await store.list("/test/app")
        assert classify_error(excinfo.value) == ErrorKind.ACCESS_DENIED


class TestWrite:
    """Test puts and deletes."""

    @pytest.mark.asyncio
    async def test_put(self, ssm_client, stubber):
        """Records are written with type, overwrite and description."""
        record = ParameterRecord.from_entry("/test/app", "API_SECRET", "abc123xyz")
        stubber.add_response(
            "put_parameter",
            {"Version": 1},
            {
                "Name": "/test/app/API_SECRET",
                "Value": "abc123xyz",
                "Type": "SecureString",
                "Overwrite": True,
                "Description": "Environment variable API_SECRET synced from .env file",
            },
        )
        await SsmParameterStore(client=ssm_client).put(record)

    @pytest.mark.asyncio
    async def test_put_error(self, ssm_client, stubber):
        """Service errors are raised as ClientError."""
        record = ParameterRecord.from_entry("/test/app", "NODE_ENV", "production")
        stubber.add_client_error("put_parameter", service_error_code="ParameterLimitExceeded")
        with pytest.raises(ClientError):
            await SsmParameterStore(client=ssm_client).put(record)

    @pytest.mark.asyncio
    async def test_delete(self, ssm_client, stubber):
        """Deletes address the full path."""
        stubber.add_response("delete_parameter", {}, {"Name": "/test/app/A"})
        await SsmParameterStore(client=ssm_client).delete("/test/app/A")


class TestSession:
    """Test session construction."""

    def test_default_region(self, ssm_client):
        """The region defaults to us-east-1."""
        assert SsmParameterStore(client=ssm_client).region == "us-east-1"

    def test_unknown_profile(self, tmp_path, monkeypatch):
        """Unknown profiles are reported as validation errors."""
        config = tmp_path / "config"
        config.write_text("[default]\nregion = us-east-1\n")
        monkeypatch.setenv("AWS_CONFIG_FILE", str(config))
        monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "credentials"))

        with pytest.raises(ValidationError, match="no-such-profile"):
            SsmParameterStore(profile="no-such-profile")
