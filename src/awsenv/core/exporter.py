"""
Rendering of stored parameters as shell export lines.
"""

from typing import List

from .errors import FatalRemoteError, RemoteStoreError, classify_error, is_fatal
from .models import RemoteParameter
from .store import RemoteStore
from .syncer import require_namespace


async def fetch_parameters(store: RemoteStore, namespace: str) -> List[RemoteParameter]:
    """
    List every parameter under a namespace.

    Raises:
        ValidationError: Missing namespace
        FatalRemoteError: Credentials or permissions rejected
        RemoteStoreError: Any other listing failure
    """
    namespace = require_namespace(namespace, "fetch")
    try:
        return await store.list(namespace)
    except Exception as e:
        kind = classify_error(e)
        if is_fatal(kind):
            raise FatalRemoteError(kind, e) from e
        raise RemoteStoreError(f"Failed to fetch parameters from {namespace}: {e}") from e


def render_exports(parameters: List[RemoteParameter], without_exporter: bool = False) -> str:
    """
    Format parameters as KEY=value lines.

    Values are stripped and newlines removed so every variable fits on one
    line.

    Args:
        parameters: Parameters listed from the store
        without_exporter: Omit the "export " prefix

    Returns:
        Lines joined by newlines
    """
    prefix = "" if without_exporter else "export "
    lines = []
    for parameter in parameters:
        value = parameter.value.strip().replace('\n', '')
        lines.append(f"{prefix}{parameter.key}={value}")
    return '\n'.join(lines)
