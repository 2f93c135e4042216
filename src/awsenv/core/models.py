"""
Records exchanged with the parameter store and per-run reports.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .inference import is_secret
from .paths import key_from_path, to_path


SECURE_STRING = "SecureString"
PLAIN_STRING = "String"


@dataclass(frozen=True)
class ParameterRecord:
    """A single parameter to be written to the store."""
    path: str
    value: str
    is_secret: bool
    description: str
    overwrite: bool = True

    @property
    def key(self) -> str:
        return key_from_path(self.path)

    @property
    def parameter_type(self) -> str:
        return SECURE_STRING if self.is_secret else PLAIN_STRING

    @classmethod
    def from_entry(
        cls,
        namespace: str,
        key: str,
        value: str,
        force_all_secret: bool = False,
    ) -> "ParameterRecord":
        """
        Build a record from a parsed .env entry.

        Args:
            namespace: Namespace prefix
            key: Environment variable key
            value: Decoded value
            force_all_secret: Store the value encrypted regardless of content

        Returns:
            ParameterRecord with upsert semantics (overwrite is always True)
        """
        return cls(
            path=to_path(namespace, key),
            value=value,
            is_secret=is_secret(key, value, force_all_secret),
            description=f"Environment variable {key} synced from .env file",
        )


@dataclass(frozen=True)
class RemoteParameter:
    """A parameter as listed from the store."""
    name: str
    value: str = ""

    @property
    def key(self) -> str:
        return key_from_path(self.name)


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one put or delete."""
    success: bool
    parameter: str
    error: Optional[str] = None


@dataclass
class BatchReport:
    """Aggregated outcome of a sync or purge run."""
    namespace: str
    results: List[OperationResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.success)

    @property
    def failures(self) -> List[OperationResult]:
        return [result for result in self.results if not result.success]

    @property
    def ok(self) -> bool:
        return self.failed == 0


@dataclass
class SyncReport(BatchReport):
    """Outcome of a sync run; records holds what was (or would be) written."""
    records: List[ParameterRecord] = field(default_factory=list)
    dry_run: bool = False


@dataclass
class PurgeReport(BatchReport):
    """Outcome of a purge run; names holds every parameter found."""
    names: List[str] = field(default_factory=list)
