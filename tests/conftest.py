"""Shared fakes and fixtures for the gateway test suite."""

import asyncio
import base64

import pytest

from gateway.errors import BackendError, NotFoundError


def b64(text: str) -> str:
    return base64.b64encode(text.encode("ascii")).decode("ascii")


class FakePushStream:
    """In-memory push stream that records listener and close traffic.

    With ``chunks`` given, the chunks (then end, or ``error``) are played
    on the event loop once a data listener is attached.
    """

    def __init__(self, chunks=None, error=None, end=True):
        self.data_listeners = []
        self.end_listeners = []
        self.error_listeners = []
        self.close_count = 0
        self.remove_count = 0
        self._script = chunks
        self._error = error
        self._end = end

    def on_data(self, listener):
        self.data_listeners.append(listener)
        if self._script is not None:
            asyncio.get_running_loop().call_soon(self._play)

    def on_end(self, listener):
        self.end_listeners.append(listener)

    def on_error(self, listener):
        self.error_listeners.append(listener)

    def remove_listeners(self):
        self.remove_count += 1
        self.data_listeners.clear()
        self.end_listeners.clear()
        self.error_listeners.clear()

    def close(self):
        self.close_count += 1

    def emit_data(self, chunk):
        for listener in list(self.data_listeners):
            listener(chunk)

    def emit_end(self):
        for listener in list(self.end_listeners):
            listener()

    def emit_error(self, exc):
        for listener in list(self.error_listeners):
            listener(exc)

    def _play(self):
        for chunk in self._script:
            self.emit_data(chunk)
        if self._error is not None:
            self.emit_error(self._error)
        elif self._end:
            self.emit_end()


class FakeControlPlane:
    def __init__(self, workflows=None, secrets=None, log_stream=None):
        self.workflows = workflows or {}
        self.secrets = secrets or {}
        self.log_stream = log_stream
        self.secret_calls = []
        self.log_calls = []
        self.list_calls = []

    async def get_workflow(self, namespace, name):
        try:
            return self.workflows[(namespace, name)]
        except KeyError:
            raise NotFoundError(f"Workflow '{namespace}/{name}' not found") from None

    async def list_workflows(self, namespace, phases=()):
        self.list_calls.append((namespace, list(phases)))
        return {"items": [wf for (ns, _), wf in self.workflows.items() if ns == namespace]}

    async def get_secret(self, namespace, name):
        self.secret_calls.append((namespace, name))
        try:
            return self.secrets[(namespace, name)]
        except KeyError:
            raise NotFoundError(f"Secret '{namespace}/{name}' not found") from None

    async def stream_pod_log(self, namespace, pod_name, container, follow=True):
        self.log_calls.append((namespace, pod_name, container, follow))
        if self.log_stream is None:
            raise NotFoundError(f"Logs of pod '{namespace}/{pod_name}' not found")
        return self.log_stream


class FakeStorage:
    def __init__(self, content=b"", fail=False):
        self.content = content
        self.fail = fail
        self.calls = []

    async def get_object(self, endpoint, bucket, key, credentials):
        self.calls.append((endpoint, bucket, key, credentials))
        if self.fail:
            try:
                raise ConnectionError("connection refused by s3.local:9000 (key=ACCESS1)")
            except ConnectionError as e:
                raise BackendError("Unable to download artifact") from e
        return self.content


def make_workflow(namespace="argo", name="wf-1", created="2024-01-01T00:00:00Z"):
    """Workflow with node ``n1`` producing the s3 artifact ``out.txt``."""
    return {
        "metadata": {"namespace": namespace, "name": name, "creationTimestamp": created},
        "status": {
            "nodes": {
                "n1": {
                    "outputs": {
                        "artifacts": [
                            {
                                "name": "out.txt",
                                "s3": {
                                    "endpoint": "s3.local",
                                    "bucket": "b",
                                    "key": "out.txt",
                                    "accessKeySecret": {"name": "s3-cred", "key": "accesskey"},
                                    "secretKeySecret": {"name": "s3-cred", "key": "secretkey"},
                                },
                            },
                            {"name": "repo", "git": {"repo": "https://example.com/r.git"}},
                        ]
                    }
                },
                "n2": {},
            }
        },
    }


@pytest.fixture
def control_plane() -> FakeControlPlane:
    return FakeControlPlane(
        workflows={("argo", "wf-1"): make_workflow()},
        secrets={("argo", "s3-cred"): {"accesskey": b64("ACCESS1"), "secretkey": b64("SECRET1")}},
    )


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage(content=b"hello artifact\x00\xff")
