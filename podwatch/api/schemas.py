"""Pydantic request/response schemas for the REST and WebSocket surfaces."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from podwatch.models.actions import ActionType, PodAction
from podwatch.models.pods import DEFAULT_REFRESH_INTERVAL_MS, NamespaceConfig


class ErrorResponse(BaseModel):
    """Error envelope returned by every non-2xx response."""

    error: str
    detail: str


class NamespaceConfigIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    enabled: bool = True
    refresh_interval: int | None = Field(DEFAULT_REFRESH_INTERVAL_MS, alias="refreshInterval", ge=0)

    def to_model(self) -> NamespaceConfig:
        return NamespaceConfig(name=self.name.strip(), enabled=self.enabled, refresh_interval=self.refresh_interval)


class PodActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: ActionType
    namespace: str = Field(min_length=1)
    pod_name: str | None = Field(None, alias="podName")
    replicas: int | None = Field(None, ge=1)

    def to_model(self) -> PodAction:
        return PodAction(
            action=self.action,
            namespace=self.namespace,
            pod_name=self.pod_name or None,
            replicas=self.replicas,
        )


class BulkActionRequest(BaseModel):
    action: ActionType
    namespaces: list[str]


class NamespaceListRequest(BaseModel):
    namespaces: list[str]
