"""
Synchronization of .env values into the parameter store.

Key features:
- Secret classification per variable (SecureString vs String)
- Upsert semantics: every record is written with Overwrite=True
- Dry runs that report the records without touching the store
- Bounded concurrency (3 in flight, 50ms stagger) with per-item results
- Fatal credential/permission errors abort the batch
"""

from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Union

from .confirm import Confirmer
from .context import RunContext, default_context
from .errors import FatalRemoteError, ValidationError, classify_error, is_fatal
from .lexer import parse_env, read_env_file
from .models import OperationResult, ParameterRecord, SyncReport
from .paths import normalize_namespace
from .pool import POOL_WIDTH, BoundedPool
from .store import RemoteStore


SUCCESS_MARKER = "."
FAILURE_MARKER = "x"


def require_namespace(namespace: Optional[str], operation: str) -> str:
    """
    Validate a namespace argument.

    The account root ("/") counts as missing for every operation.

    Raises:
        ValidationError: If the namespace is missing or blank
    """
    if not namespace or not normalize_namespace(namespace.strip()):
        raise ValidationError(f"Namespace is required for {operation} operation")
    return namespace.strip()


def prepare_parameters(
    namespace: str,
    env_vars: Dict[str, str],
    force_all_secret: bool = False,
) -> List[ParameterRecord]:
    """
    Turn parsed .env values into parameter records.

    Args:
        namespace: Namespace prefix
        env_vars: Decoded key -> value mapping
        force_all_secret: Store every value as SecureString

    Returns:
        One record per variable, in mapping order
    """
    return [
        ParameterRecord.from_entry(namespace, key, value, force_all_secret)
        for key, value in env_vars.items()
    ]


class BatchEngine:
    """
    Shared plumbing for engines that fan calls out to the store.

    Args:
        store: RemoteStore implementation
        confirmer: Confirmer used for interactive questions (optional)
        context: RunContext for output and diagnostics
    """

    log_name = "batch"

    def __init__(
        self,
        store: RemoteStore,
        confirmer: Optional[Confirmer] = None,
        context: Optional[RunContext] = None,
    ):
        self.store = store
        self.confirmer = confirmer
        self.context = context.child(self.log_name) if context else default_context(self.log_name)
        self.pool = BoundedPool()

    async def _call(self, call: Callable[[], Awaitable[None]], parameter: str) -> OperationResult:
        """
        Run one store call and capture its outcome.

        Raises:
            FatalRemoteError: If the failure means every later call fails too
        """
        try:
            await call()
        except Exception as e:
            kind = classify_error(e)
            if is_fatal(kind):
                self.context.logger.debug("Fatal %s on %s: %s", kind.value, parameter, e)
                raise FatalRemoteError(kind, e) from e
            self.context.progress(FAILURE_MARKER)
            self.context.logger.debug("Failed on %s: %s", parameter, e)
            return OperationResult(success=False, parameter=parameter, error=str(e))

        self.context.progress(SUCCESS_MARKER)
        return OperationResult(success=True, parameter=parameter)


class SyncEngine(BatchEngine):
    """
    Pushes a .env file (or an in-memory blob) into a namespace.

    Runs Idle -> Parsed -> (dry run | classified) -> dispatching ->
    completed, or aborts with FatalRemoteError.
    """

    log_name = "sync"

    def load(self, path: Optional[Union[str, Path]] = None, content: Optional[str] = None) -> Dict[str, str]:
        """
        Parse the value source; exactly one of path or content is required.

        Raises:
            ValidationError: If neither or both sources are given, or the
                file cannot be read
        """
        if (path is None) == (content is None):
            raise ValidationError("Provide exactly one input source: a file path or raw content")

        if content is not None:
            self.context.debug("Reading variables from raw input (%d chars)", len(content))
            return parse_env(content)

        self.context.debug("Reading variables from %s", path)
        return read_env_file(path)

    def ask_confirmation(self, records: List[ParameterRecord], namespace: str) -> bool:
        if self.confirmer is None:
            return True
        return self.confirmer.confirm(
            f"This will create/update {len(records)} parameters in {namespace}. Continue? (y/N):"
        )

    async def upload_parameters(self, records: List[ParameterRecord]) -> List[OperationResult]:
        """
        Write records with bounded concurrency.

        Returns:
            Results aligned with records

        Raises:
            FatalRemoteError: On authentication, expiry or permission errors
        """
        self.context.debug("Uploading %d parameters with concurrency: %d", len(records), POOL_WIDTH)

        async def put(record: ParameterRecord) -> OperationResult:
            return await self._call(lambda: self.store.put(record), record.path)

        results = await self.pool.run(records, put)
        self.context.console.print()
        return results

    async def sync(
        self,
        namespace: Optional[str],
        *,
        path: Optional[Union[str, Path]] = None,
        content: Optional[str] = None,
        force_all_secret: bool = False,
        dry_run: bool = False,
        force: bool = False,
    ) -> SyncReport:
        """
        Sync variables into the namespace.

        Args:
            namespace: Target namespace (required)
            path: .env file to read
            content: Raw .env text, used instead of path
            force_all_secret: Store every value as SecureString
            dry_run: Only compute the records
            force: Skip the confirmation question

        Returns:
            SyncReport with the records and per-item results

        Raises:
            ValidationError: Missing namespace or input source
            FatalRemoteError: Credentials or permissions rejected
        """
        namespace = require_namespace(namespace, "sync")
        env_vars = self.load(path=path, content=content)
        report = SyncReport(namespace=namespace, dry_run=dry_run)

        if not env_vars:
            self.context.debug("No variables found, nothing to sync")
            return report

        report.records = prepare_parameters(namespace, env_vars, force_all_secret)
        secrets = sum(1 for record in report.records if record.is_secret)
        self.context.debug(
            "Prepared %d parameters (%d SecureString) under %s",
            len(report.records), secrets, namespace,
        )

        if dry_run:
            return report

        if not force and not self.ask_confirmation(report.records, namespace):
            report.cancelled = True
            return report

        report.results = await self.upload_parameters(report.records)
        return report
