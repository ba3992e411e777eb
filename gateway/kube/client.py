"""Control-plane client -- workflow custom resources, secrets and pod logs
via the Kubernetes API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from kubernetes_asyncio import client, config
from kubernetes_asyncio.client.exceptions import ApiException

from gateway.config.settings import Settings
from gateway.errors import BackendError, GatewayError, NotFoundError, UnauthorizedError
from gateway.streaming.pump import AsyncIteratorStream

logger = logging.getLogger(__name__)

WORKFLOW_PLURAL = "workflows"
PHASE_LABEL = "workflows.argoproj.io/phase"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _translate(exc: ApiException, what: str) -> GatewayError:
    if exc.status == 404:
        return NotFoundError(f"{what} not found")
    if exc.status in (401, 403):
        return UnauthorizedError(f"Access to {what} denied")
    logger.error(f"Control plane request for {what} failed: {exc.status} {exc.reason}")
    return BackendError(f"Unable to read {what}")


def _creation_time(item: dict[str, Any]) -> datetime:
    raw = (item.get("metadata") or {}).get("creationTimestamp")
    if not raw:
        return _EPOCH
    try:
        created = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    return created if created.tzinfo else created.replace(tzinfo=timezone.utc)


def phase_selector(phases: Iterable[str]) -> str:
    """Label selector matching workflows in any of ``phases``."""
    phases = [p for p in phases if p]
    if not phases:
        return ""
    return f"{PHASE_LABEL} in ({','.join(phases)})"


class ControlPlaneClient:
    """One configured Kubernetes API client shared by every request."""

    def __init__(self, api_client: client.ApiClient, settings: Optional[Settings] = None):
        self._settings = settings or Settings()
        self._api_client = api_client
        self._core = client.CoreV1Api(api_client)
        self._custom = client.CustomObjectsApi(api_client)

    @classmethod
    async def connect(cls, settings: Optional[Settings] = None) -> "ControlPlaneClient":
        settings = settings or Settings()
        if settings.in_cluster:
            config.load_incluster_config()
        else:
            await config.load_kube_config(config_file=settings.kubeconfig or None)
        logger.info(f"Connected to control plane (in_cluster={settings.in_cluster})")
        return cls(client.ApiClient(), settings)

    async def close(self) -> None:
        await self._api_client.close()

    async def get_workflow(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            return await self._custom.get_namespaced_custom_object(
                self._settings.crd_group,
                self._settings.crd_version,
                namespace,
                WORKFLOW_PLURAL,
                name,
            )
        except ApiException as e:
            raise _translate(e, f"Workflow '{namespace}/{name}'") from e

    async def list_workflows(self, namespace: str, phases: Iterable[str] = ()) -> dict[str, Any]:
        """List workflows in ``namespace``, newest first."""
        try:
            workflow_list = await self._custom.list_namespaced_custom_object(
                self._settings.crd_group,
                self._settings.crd_version,
                namespace,
                WORKFLOW_PLURAL,
                label_selector=phase_selector(phases),
            )
        except ApiException as e:
            raise _translate(e, f"Workflows in '{namespace}'") from e
        workflow_list["items"] = sorted(
            workflow_list.get("items") or [], key=_creation_time, reverse=True
        )
        return workflow_list

    async def get_secret(self, namespace: str, name: str) -> dict[str, str]:
        try:
            secret = await self._core.read_namespaced_secret(name, namespace)
        except ApiException as e:
            raise _translate(e, f"Secret '{namespace}/{name}'") from e
        return dict(secret.data or {})

    async def stream_pod_log(
        self, namespace: str, pod_name: str, container: str, follow: bool = True
    ) -> AsyncIteratorStream:
        try:
            response = await self._core.read_namespaced_pod_log(
                pod_name,
                namespace,
                container=container,
                follow=follow,
                _preload_content=False,
            )
        except ApiException as e:
            raise _translate(e, f"Logs of pod '{namespace}/{pod_name}'") from e
        return AsyncIteratorStream(response.content.iter_any(), on_close=response.close)
