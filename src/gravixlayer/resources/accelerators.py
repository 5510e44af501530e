"""
Accelerator catalogue (``GET /v1/accelerators``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from ..models.accelerators import Accelerator
from ._listing import _rows, logger

if TYPE_CHECKING:
    from .._base import _BaseClient


class Accelerators:
    def __init__(self, client: "_BaseClient"):
        self._client = client

    def list(self) -> List[Accelerator]:
        url = f"{self._client.config.service_url('/v1')}/accelerators"
        response = self._client._request("GET", url)
        return [_accelerator(row) for row in _rows(response.json(), "accelerators")]


def _use_case(memory_gb: int) -> str:
    if memory_gb <= 16:
        return "Small models, development"
    if memory_gb <= 32:
        return "Medium models"
    return "Large models, production"


def _memory_gb(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        logger.warning("Unexpected hw_memory value: %r", value)
        return 0


def _accelerator(raw: Dict[str, Any]) -> Accelerator:
    accelerator_id = raw.get("accelerator_id") or ""
    hw_model = raw.get("hw_model") or ""
    hw_link = raw.get("hw_link") or ""
    hw_memory = _memory_gb(raw.get("hw_memory"))
    provider = raw.get("provider") or ""

    return Accelerator(
        accelerator_id=accelerator_id,
        pricing=raw.get("pricing") or 0,
        hw_model=hw_model,
        hw_link=hw_link,
        hw_memory=hw_memory,
        provider=provider,
        status=raw.get("status") or "",
        updated_at=raw.get("updated_at") or "",
        name=accelerator_id.replace("_", " "),
        hardware_string=(
            f"{provider.lower()}-{hw_model.lower()}-{hw_memory}gb-{hw_link.lower()}_1"
        ),
        memory=f"{hw_memory}GB",
        gpu_type=hw_model.lower(),
        use_case=_use_case(hw_memory),
    )
