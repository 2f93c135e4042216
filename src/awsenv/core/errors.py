"""
Error taxonomy and remote error classification.

Failures fall into a few groups:
- ValidationError: bad input (missing namespace, missing source file)
- RemoteStoreError: a store call failed outside of a batch
- FatalError: the run cannot continue (bad credentials, expired session,
  denied access, paranoid lock)

Per-item batch failures are not exceptions at all; they are recorded as
failed OperationResults by the engines.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Classification of a raw error raised by the remote store."""
    AUTH_INVALID = "auth_invalid"
    TOKEN_EXPIRED = "token_expired"
    ACCESS_DENIED = "access_denied"
    OTHER = "other"


FATAL_KINDS = frozenset({
    ErrorKind.AUTH_INVALID,
    ErrorKind.TOKEN_EXPIRED,
    ErrorKind.ACCESS_DENIED,
})

EXPIRED_CODES = {
    'ExpiredToken',
    'ExpiredTokenException',
    'RequestExpired',
    'TokenRetrievalError',
    'SSOTokenLoadError',
    'UnauthorizedSSOTokenError',
}

AUTH_CODES = {
    'UnrecognizedClientException',
    'InvalidClientTokenId',
    'InvalidSignatureException',
    'IncompleteSignature',
    'AuthFailure',
    'SignatureDoesNotMatch',
    'NoCredentialsError',
    'PartialCredentialsError',
}

DENIED_CODES = {
    'AccessDenied',
    'AccessDeniedException',
    'UnauthorizedOperation',
    'UnauthorizedAccess',
}

EXPIRED_PHRASES = ('token expired', 'token is expired', 'session has expired', 'is expired')
AUTH_PHRASES = ('security token included in the request is invalid', 'invalid credentials',
                'unable to locate credentials')
DENIED_PHRASES = ('accessdenied', 'access denied', 'not authorized', 'permission denied')

REMEDIATION = {
    ErrorKind.AUTH_INVALID: (
        "Your AWS credentials are invalid or missing.\n"
        "Check your AWS configuration (aws configure --profile <name>) and try again."
    ),
    ErrorKind.TOKEN_EXPIRED: (
        "Your AWS session has expired.\n"
        "Refresh it (for SSO profiles: aws sso login --profile <name>) and try again."
    ),
    ErrorKind.ACCESS_DENIED: (
        "Your AWS identity is not allowed to perform this operation.\n"
        "Ask for ssm:GetParametersByPath, ssm:PutParameter and ssm:DeleteParameter "
        "permissions on the namespace (and kms access for SecureString values)."
    ),
}


class AwsEnvError(Exception):
    """Base class for awsenv errors."""


class ValidationError(AwsEnvError):
    """Input is missing or inconsistent; nothing was sent to the store."""


class RemoteStoreError(AwsEnvError):
    """A store call failed in a way that is not tied to credentials."""


class FatalError(AwsEnvError):
    """The whole run must stop."""

    remediation: str = ""


class FatalRemoteError(FatalError):
    """Credentials or permissions make every further store call pointless."""

    def __init__(self, kind: ErrorKind, original: Optional[BaseException] = None):
        self.kind = kind
        self.original = original
        self.remediation = REMEDIATION.get(kind, "")
        detail = f": {original}" if original is not None else ""
        super().__init__(f"AWS {kind.value.replace('_', ' ')}{detail}")


class ParanoidModeError(FatalError):
    """Destructive operation refused because paranoid mode is on."""

    remediation = (
        "Paranoid mode is enabled, preventing purge operations.\n"
        "To disable paranoid mode:\n"
        "  1. Remove --paranoid flag from command\n"
        "  2. Set paranoid = false in .awsenv config\n"
        "  3. Or remove paranoid setting from config"
    )

    def __init__(self, namespace: Optional[str] = None):
        self.namespace = namespace
        super().__init__("Purge blocked by paranoid mode")


def error_code(error: BaseException) -> str:
    """
    Extract the service error code from an exception.

    botocore ClientErrors carry it in ``response['Error']['Code']``; every
    other exception is identified by its class name.
    """
    response = getattr(error, 'response', None)
    if isinstance(response, dict):
        code = response.get('Error', {}).get('Code')
        if code:
            return str(code)
    return type(error).__name__


def classify_error(error: BaseException) -> ErrorKind:
    """
    Classify a raw store error as fatal (by kind) or ordinary.

    Expiry is checked first because expired-token messages also mention the
    security token, then authentication, then authorization.

    Args:
        error: Exception raised by a RemoteStore call

    Returns:
        The matching ErrorKind (OTHER for per-item failures)
    """
    if isinstance(error, FatalRemoteError):
        return error.kind

    code = error_code(error)
    message = str(error).lower()

    if code in EXPIRED_CODES or any(phrase in message for phrase in EXPIRED_PHRASES):
        return ErrorKind.TOKEN_EXPIRED

    if code in AUTH_CODES or any(phrase in message for phrase in AUTH_PHRASES):
        return ErrorKind.AUTH_INVALID

    if code in DENIED_CODES or any(phrase in message for phrase in DENIED_PHRASES):
        return ErrorKind.ACCESS_DENIED

    return ErrorKind.OTHER


def is_fatal(kind: ErrorKind) -> bool:
    return kind in FATAL_KINDS
