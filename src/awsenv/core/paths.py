"""
Mapping between local variable names and Parameter Store paths.
"""


def normalize_namespace(namespace: str) -> str:
    """Strip trailing slashes from a namespace."""
    return namespace.rstrip('/')


def to_path(namespace: str, key: str) -> str:
    """
    Build the full parameter path for a key.

    Args:
        namespace: Namespace prefix, e.g. "/production/my-app/"
        key: Environment variable key

    Returns:
        Parameter path, e.g. "/production/my-app/KEY"
    """
    return f"{normalize_namespace(namespace)}/{key}"


def key_from_path(path: str) -> str:
    """Return the last "/"-delimited segment of a parameter path."""
    return path.rsplit('/', 1)[-1]
