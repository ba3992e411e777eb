"""S3-compatible object storage client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from gateway.config.settings import Settings
from gateway.errors import BackendError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageCredentials:
    access_key: str
    secret_key: str

    def __repr__(self) -> str:
        return "StorageCredentials(access_key=***, secret_key=***)"


class S3Storage:
    """Fetches single objects with a client scoped to each request's endpoint."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or Settings()
        self._session = aioboto3.Session()

    def endpoint_url(self, endpoint: str) -> str:
        if "://" in endpoint:
            return endpoint
        return f"{self._settings.s3_scheme}://{endpoint}"

    async def get_object(
        self, endpoint: str, bucket: str, key: str, credentials: StorageCredentials
    ) -> bytes:
        """Return the full body of ``bucket/key``; the object is buffered in memory."""
        client_config = Config(
            signature_version=self._settings.s3_signature_version,
            s3={"addressing_style": "path"},
        )
        try:
            async with self._session.client(
                "s3",
                endpoint_url=self.endpoint_url(endpoint),
                aws_access_key_id=credentials.access_key,
                aws_secret_access_key=credentials.secret_key,
                config=client_config,
            ) as s3:
                response = await s3.get_object(Bucket=bucket, Key=key)
                async with response["Body"] as body:
                    return await body.read()
        except (BotoCoreError, ClientError, ValueError) as e:
            logger.error(f"Failed to fetch s3://{bucket}/{key} from {endpoint}: {e}")
            raise BackendError("Unable to download artifact") from e
