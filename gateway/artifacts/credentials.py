from __future__ import annotations

import base64
import binascii
import logging
from typing import Protocol

from gateway.errors import CredentialDecodeError, NotFoundError
from gateway.models.workflow import SecretReference

logger = logging.getLogger(__name__)


class SecretReader(Protocol):
    async def get_secret(self, namespace: str, name: str) -> dict[str, str]: ...


class CredentialResolver:
    """Resolves secret references into credential strings.

    Nothing is cached: each call re-reads the secret, so a rotated secret
    is picked up by the next request.
    """

    def __init__(self, secrets: SecretReader):
        self._secrets = secrets

    async def resolve(self, namespace: str, ref: SecretReference) -> str:
        data = await self._secrets.get_secret(namespace, ref.name)
        if ref.key not in data:
            raise NotFoundError(f"Key '{ref.key}' not found in secret '{namespace}/{ref.name}'")
        try:
            return base64.b64decode(data[ref.key], validate=True).decode("ascii")
        except (binascii.Error, UnicodeDecodeError) as e:
            logger.error(f"Secret '{namespace}/{ref.name}' key '{ref.key}' is not valid base64 text")
            raise CredentialDecodeError(
                f"Secret '{namespace}/{ref.name}' does not hold a usable credential"
            ) from e
