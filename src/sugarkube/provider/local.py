"""Provider for clusters running on the local machine."""

from __future__ import annotations

from .base import Provider, Values

LOCAL_PROVIDER_NAME = "local"
DEFAULT_KUBE_CONTEXT = "minikube"


class LocalProvider(Provider):
    """Local clusters (e.g. minikube)."""

    name = LOCAL_PROVIDER_NAME

    def derived_vars(self, values: Values) -> Values:
        return {"kube_context": values.get("kube_context") or DEFAULT_KUBE_CONTEXT}

    def installer_vars(self) -> Values:
        return {}
