"""Error taxonomy for the gateway.

Every error carries the HTTP status and machine-readable code it is
rendered with, plus a client-facing message. Backend errors keep the
underlying cause on ``__cause__`` for server-side logging only.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base exception for the gateway."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(GatewayError):
    """A workflow, node, artifact, secret or secret key does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class UnsupportedArtifactError(GatewayError):
    """The artifact is stored in a backend this gateway cannot download from."""

    status_code = 400
    code = "UNSUPPORTED_ARTIFACT"


class UnauthorizedError(GatewayError):
    """The control plane refused access to a resource."""

    status_code = 403
    code = "UNAUTHORIZED"


class CredentialDecodeError(UnauthorizedError):
    """A secret value could not be decoded into a credential."""

    code = "INVALID_CREDENTIALS"


class BackendError(GatewayError):
    """Storage or log source failure. The message is always generic."""

    status_code = 500
    code = "INTERNAL_ERROR"
