"""Artifact fetcher -- locates a node's output artifact, resolves its storage
credentials and downloads the object.

The whole object is read into memory before it is relayed, so the size
of a downloadable artifact is bounded by available memory.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from gateway.errors import UnsupportedArtifactError
from gateway.models.workflow import S3ArtifactLocation, Workflow
from gateway.storage.s3 import StorageCredentials

from .credentials import CredentialResolver

logger = logging.getLogger(__name__)


class WorkflowReader(Protocol):
    async def get_workflow(self, namespace: str, name: str) -> dict[str, Any]: ...


class ObjectStorage(Protocol):
    async def get_object(
        self, endpoint: str, bucket: str, key: str, credentials: StorageCredentials
    ) -> bytes: ...


@dataclass(frozen=True)
class ArtifactDownload:
    filename: str
    content: bytes

    @property
    def content_disposition(self) -> str:
        return f"attachment; filename={self.filename}"


class ArtifactFetcher:
    def __init__(
        self,
        workflows: WorkflowReader,
        credentials: CredentialResolver,
        storage: ObjectStorage,
    ):
        self._workflows = workflows
        self._credentials = credentials
        self._storage = storage

    async def locate(
        self, namespace: str, workflow_name: str, node_name: str, artifact_name: str
    ) -> tuple[str, S3ArtifactLocation]:
        """Return the namespace holding the artifact's secrets and its location.

        Raises NotFoundError for a missing workflow, node or artifact.
        """
        workflow = Workflow.from_dict(await self._workflows.get_workflow(namespace, workflow_name))
        artifact = workflow.find_artifact(node_name, artifact_name)
        if artifact.s3 is None:
            raise UnsupportedArtifactError(
                f"Artifact '{artifact_name}' is stored in '{artifact.kind}', not object storage"
            )
        return workflow.namespace or namespace, artifact.s3

    async def fetch(
        self, namespace: str, workflow_name: str, node_name: str, artifact_name: str
    ) -> ArtifactDownload:
        secret_namespace, location = await self.locate(
            namespace, workflow_name, node_name, artifact_name
        )
        access_key, secret_key = await asyncio.gather(
            self._credentials.resolve(secret_namespace, location.access_key_secret),
            self._credentials.resolve(secret_namespace, location.secret_key_secret),
        )
        logger.info(
            f"Downloading artifact {artifact_name} of {namespace}/{workflow_name}/{node_name} "
            f"from {location.endpoint}/{location.bucket}"
        )
        content = await self._storage.get_object(
            location.endpoint,
            location.bucket,
            location.key,
            StorageCredentials(access_key=access_key, secret_key=secret_key),
        )
        return ArtifactDownload(filename=location.filename, content=content)
