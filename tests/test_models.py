"""Tests for the workflow document models."""

import pytest

from gateway.errors import NotFoundError
from gateway.models.workflow import Artifact, S3ArtifactLocation, SecretReference, Workflow

from tests.conftest import make_workflow


class TestWorkflow:
    def test_parses_metadata_and_nodes(self):
        wf = Workflow.from_dict(make_workflow(namespace="ci", name="build"))
        assert wf.namespace == "ci"
        assert wf.name == "build"
        assert set(wf.nodes) == {"n1", "n2"}
        assert wf.nodes["n2"].artifacts == []

    def test_find_artifact_returns_s3_location(self):
        artifact = Workflow.from_dict(make_workflow()).find_artifact("n1", "out.txt")
        assert artifact.kind == "s3"
        assert artifact.s3 == S3ArtifactLocation(
            endpoint="s3.local",
            bucket="b",
            key="out.txt",
            access_key_secret=SecretReference(name="s3-cred", key="accesskey"),
            secret_key_secret=SecretReference(name="s3-cred", key="secretkey"),
        )

    def test_find_artifact_missing_node(self):
        with pytest.raises(NotFoundError):
            Workflow.from_dict(make_workflow()).find_artifact("n7", "out.txt")

    def test_find_artifact_missing_name(self):
        with pytest.raises(NotFoundError):
            Workflow.from_dict(make_workflow()).find_artifact("n1", "other")

    def test_workflow_without_status(self):
        wf = Workflow.from_dict({"metadata": {"name": "pending"}})
        assert wf.nodes == {}
        assert wf.namespace == ""


class TestArtifact:
    def test_non_s3_artifact_has_kind_but_no_location(self):
        artifact = Artifact.from_dict({"name": "repo", "git": {"repo": "https://example.com/r.git"}})
        assert artifact.kind == "git"
        assert artifact.s3 is None

    def test_artifact_without_location(self):
        artifact = Artifact.from_dict({"name": "empty"})
        assert artifact.kind is None

    @pytest.mark.parametrize(
        "key,filename",
        [("out.txt", "out.txt"), ("a/b/c.tgz", "c.tgz"), ("logs/main/", "main")],
    )
    def test_filename_from_key(self, key, filename):
        location = S3ArtifactLocation.from_dict({"key": key})
        assert location.filename == filename
