"""
Dedicated model deployments (``/v1/deployments``).
"""

from __future__ import annotations

import random
import string
import time
from typing import TYPE_CHECKING, Any, Dict, List

from ..exceptions import GravixLayerError
from ..models.accelerators import Accelerator
from ..models.deployments import Deployment, DeploymentResponse
from ._listing import _rows
from .accelerators import Accelerators

if TYPE_CHECKING:
    from .._base import _BaseClient

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def unique_deployment_name(name: str) -> str:
    """
    ``name`` plus a suffix of 4 timestamp digits and 4 random base36 chars.
    """
    timestamp = str(int(time.time()))[-4:]
    suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=4))
    return f"{name}-{timestamp}{suffix}"


class Deployments:
    def __init__(self, client: "_BaseClient"):
        self._client = client

    def _url(self, path: str) -> str:
        return f"{self._client.config.service_url('/v1/deployments')}/{path}"

    def create(
        self,
        deployment_name: str,
        model_name: str,
        gpu_model: str,
        gpu_count: int = 1,
        min_replicas: int = 1,
        max_replicas: int = 1,
        hw_type: str = "dedicated",
        auto_retry: bool = False,
    ) -> DeploymentResponse:
        """
        Create a deployment.

        Args:
            deployment_name: Name of the deployment.
            model_name: Model to serve.
            gpu_model: Accelerator id, e.g. ``NVIDIA_T4_16GB``.
            auto_retry: Append a unique suffix to ``deployment_name`` so that
                re-running with a taken name does not conflict.
        """
        if auto_retry:
            deployment_name = unique_deployment_name(deployment_name)

        body = {
            "deployment_name": deployment_name,
            "hw_type": hw_type or "dedicated",
            "gpu_model": gpu_model,
            "gpu_count": gpu_count or 1,
            "min_replicas": min_replicas or 1,
            "max_replicas": max_replicas or 1,
            "model_name": model_name,
        }
        response = self._client._request("POST", self._url("create"), body=body)
        return DeploymentResponse.model_validate(response.json())

    def list(self) -> List[Deployment]:
        response = self._client._request("GET", self._url("list"))
        return [
            Deployment.model_validate(row)
            for row in _rows(response.json(), "deployments")
        ]

    def get(self, deployment_id: str) -> Deployment:
        """
        Find a deployment by id or by name.

        Raises:
            GravixLayerError: If no deployment matches.
        """
        for deployment in self.list():
            if deployment_id in (deployment.deployment_id, deployment.deployment_name):
                return deployment
        raise GravixLayerError(
            f"Deployment with ID or Name '{deployment_id}' not found"
        )

    def delete(self, deployment_id: str) -> Dict[str, Any]:
        response = self._client._request(
            "DELETE", self._url(f"delete/{deployment_id}")
        )
        return response.json()

    def list_hardware(self) -> List[Accelerator]:
        """
        List the accelerators available for deployments.
        """
        return Accelerators(self._client).list()
