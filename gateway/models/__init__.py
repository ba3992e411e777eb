from .workflow import (
    Artifact,
    S3ArtifactLocation,
    SecretReference,
    Workflow,
    WorkflowNode,
)

__all__ = ["Artifact", "S3ArtifactLocation", "SecretReference", "Workflow", "WorkflowNode"]
