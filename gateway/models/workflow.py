from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from gateway.errors import NotFoundError

# Location keys an artifact may carry; exactly one is populated per artifact.
ARTIFACT_KINDS = ("s3", "git", "http", "artifactory", "hdfs", "raw")


@dataclass(frozen=True)
class SecretReference:
    """Points at one key of a secret object in the workflow's namespace."""

    name: str
    key: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SecretReference":
        return cls(name=data.get("name", ""), key=data.get("key", ""))


@dataclass(frozen=True)
class S3ArtifactLocation:
    """Where an object-store backed artifact lives and how to reach it."""

    endpoint: str
    bucket: str
    key: str
    access_key_secret: SecretReference
    secret_key_secret: SecretReference

    @property
    def filename(self) -> str:
        return self.key.rstrip("/").rsplit("/", 1)[-1]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "S3ArtifactLocation":
        return cls(
            endpoint=data.get("endpoint", ""),
            bucket=data.get("bucket", ""),
            key=data.get("key", ""),
            access_key_secret=SecretReference.from_dict(data.get("accessKeySecret") or {}),
            secret_key_secret=SecretReference.from_dict(data.get("secretKeySecret") or {}),
        )


@dataclass
class Artifact:
    name: str
    kind: Optional[str] = None
    s3: Optional[S3ArtifactLocation] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Artifact":
        kind = next((k for k in ARTIFACT_KINDS if data.get(k)), None)
        s3 = S3ArtifactLocation.from_dict(data["s3"]) if kind == "s3" else None
        return cls(name=data.get("name", ""), kind=kind, s3=s3)


@dataclass
class WorkflowNode:
    name: str
    artifacts: list[Artifact] = field(default_factory=list)

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "WorkflowNode":
        outputs = data.get("outputs") or {}
        return cls(
            name=name,
            artifacts=[Artifact.from_dict(a) for a in outputs.get("artifacts") or []],
        )

    def get_artifact(self, artifact_name: str) -> Optional[Artifact]:
        return next((a for a in self.artifacts if a.name == artifact_name), None)


@dataclass
class Workflow:
    """Read-only view over a workflow custom resource document."""

    namespace: str
    name: str
    nodes: dict[str, WorkflowNode] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Workflow":
        metadata = data.get("metadata") or {}
        status = data.get("status") or {}
        nodes = {
            node_name: WorkflowNode.from_dict(node_name, node or {})
            for node_name, node in (status.get("nodes") or {}).items()
        }
        return cls(
            namespace=metadata.get("namespace", ""),
            name=metadata.get("name", ""),
            nodes=nodes,
            raw=data,
        )

    def find_artifact(self, node_name: str, artifact_name: str) -> Artifact:
        node = self.nodes.get(node_name)
        if node is None:
            raise NotFoundError(f"Node '{node_name}' not found in workflow '{self.name}'")
        artifact = node.get_artifact(artifact_name)
        if artifact is None:
            raise NotFoundError(f"Artifact '{artifact_name}' not found in node '{node_name}'")
        return artifact
