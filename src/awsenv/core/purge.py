"""
Irreversible deletion of every parameter under a namespace.

Safety gates, in order:
- paranoid mode refuses before anything else happens
- the operator must type "yes", then the namespace itself (unless forced)
"""

from typing import List, Optional

from rich.markup import escape

from .errors import ParanoidModeError
from .exporter import fetch_parameters
from .models import OperationResult, PurgeReport
from .pool import POOL_WIDTH
from .syncer import BatchEngine, require_namespace


PREVIEW_LIMIT = 10


class PurgeEngine(BatchEngine):
    """Lists a namespace and deletes everything in it."""

    log_name = "purge"

    async def list_parameters(self, namespace: str) -> List[str]:
        """
        Collect the names of every parameter under the namespace.

        Raises:
            FatalRemoteError: Credentials or permissions rejected
            RemoteStoreError: Any other listing failure
        """
        self.context.debug("Fetching parameters to purge from namespace %s", namespace)
        parameters = await fetch_parameters(self.store, namespace)
        return [parameter.name for parameter in parameters]

    def show_warning(self, names: List[str], namespace: str) -> None:
        console = self.context.console
        console.print()
        console.print("[bold red]WARNING: DESTRUCTIVE OPERATION[/bold red]")
        console.print()
        console.print(f"You are about to DELETE {len(names)} parameters from:")
        console.print(f"  Namespace: {escape(namespace)}", highlight=False)
        console.print()
        console.print("Parameters to be deleted:")
        for name in names[:PREVIEW_LIMIT]:
            console.print(f"  - {escape(name)}", highlight=False)
        if len(names) > PREVIEW_LIMIT:
            console.print(f"  ... and {len(names) - PREVIEW_LIMIT} more")
        console.print()
        console.print("[bold]This action CANNOT be undone![/bold]")
        console.print()

    def ask_confirmation(self, names: List[str], namespace: str) -> bool:
        """
        Two-step confirmation: "yes", then the exact namespace.

        Without a confirmer nothing can be confirmed, so the purge is refused.
        """
        if self.confirmer is None:
            return False

        self.show_warning(names, namespace)

        answer = self.confirmer.ask('Are you absolutely sure? Type "yes" to continue:')
        if answer.strip().lower() != "yes":
            return False

        answer = self.confirmer.ask(f'Type the namespace "{namespace}" to confirm deletion:')
        return answer.strip() == namespace

    async def delete_parameters(self, names: List[str]) -> List[OperationResult]:
        """
        Delete parameters with bounded concurrency.

        Returns:
            Results aligned with names

        Raises:
            FatalRemoteError: On authentication, expiry or permission errors
        """
        self.context.debug("Deleting %d parameters with concurrency: %d", len(names), POOL_WIDTH)

        async def delete(name: str) -> OperationResult:
            return await self._call(lambda: self.store.delete(name), name)

        results = await self.pool.run(names, delete)
        self.context.console.print()
        return results

    async def purge(
        self,
        namespace: Optional[str],
        *,
        paranoid: bool = False,
        force: bool = False,
    ) -> PurgeReport:
        """
        Delete every parameter under the namespace.

        Args:
            namespace: Namespace to empty (required)
            paranoid: Standing lock; refuses the purge outright
            force: Skip both confirmation questions

        Returns:
            PurgeReport with names found and per-item results

        Raises:
            ParanoidModeError: Paranoid mode is on
            ValidationError: Missing namespace
            FatalRemoteError: Credentials or permissions rejected
            RemoteStoreError: Listing failed for another reason
        """
        if paranoid:
            raise ParanoidModeError(namespace)

        namespace = require_namespace(namespace, "purge")
        report = PurgeReport(namespace=namespace)
        report.names = await self.list_parameters(namespace)

        if not report.names:
            self.context.debug("No parameters found in namespace %s", namespace)
            return report

        if not force and not self.ask_confirmation(report.names, namespace):
            report.cancelled = True
            return report

        report.results = await self.delete_parameters(report.names)
        return report
