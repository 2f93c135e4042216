"""
Shared fixtures: an in-memory parameter store, scripted confirmations and a
captured console.
"""

import asyncio
import io
import logging
from typing import Dict, List, Optional, Tuple

import pytest
from rich.console import Console

from awsenv.core.confirm import Confirmer
from awsenv.core.context import RunContext
from awsenv.core.models import ParameterRecord, RemoteParameter


class FakeAwsError(Exception):
    """Exception shaped like a botocore ClientError."""

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.response = {"Error": {"Code": code, "Message": message or code}}


class InMemoryStore:
    """
    RemoteStore double that records every call and tracks concurrency.

    Args:
        parameters: Initial path -> value mapping
        failures: path -> exception raised when that path is put or deleted
        latency: Seconds each put/delete spends "in flight"
    """

    def __init__(
        self,
        parameters: Optional[Dict[str, str]] = None,
        failures: Optional[Dict[str, Exception]] = None,
        latency: float = 0.01,
    ):
        self.parameters = dict(parameters or {})
        self.types: Dict[str, str] = {}
        self.records: Dict[str, ParameterRecord] = {}
        self.failures = dict(failures or {})
        self.latency = latency
        self.list_error: Optional[Exception] = None
        self.calls: List[Tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def calls_to(self, operation: str) -> List[str]:
        return [name for op, name in self.calls if op == operation]

    async def _call(self, operation: str, name: str) -> None:
        self.calls.append((operation, name))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency)
            if name in self.failures:
                raise self.failures[name]
        finally:
            self.in_flight -= 1

    async def list(self, prefix: str) -> List[RemoteParameter]:
        self.calls.append(("list", prefix))
        if self.list_error is not None:
            raise self.list_error
        root = prefix.rstrip('/') + '/'
        return [
            RemoteParameter(name=name, value=value)
            for name, value in self.parameters.items()
            if name.startswith(root)
        ]

    async def put(self, record: ParameterRecord) -> None:
        await self._call("put", record.path)
        self.parameters[record.path] = record.value
        self.types[record.path] = record.parameter_type
        self.records[record.path] = record

    async def delete(self, name: str) -> None:
        await self._call("delete", name)
        del self.parameters[name]


class ScriptedConfirmer(Confirmer):
    """Answers questions from a fixed script; runs out as empty answers."""

    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.prompts: List[str] = []

    def ask(self, message: str) -> str:
        self.prompts.append(message)
        return self.answers.pop(0) if self.answers else ""


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def console():
    return Console(file=io.StringIO(), force_terminal=False, width=120)


@pytest.fixture
def context(console):
    return RunContext(console=console, logger=logging.getLogger("awsenv.test"))


def output_of(context: RunContext) -> str:
    """Everything printed to a captured console so far."""
    return context.console.file.getvalue()
