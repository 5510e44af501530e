from pydantic import BaseModel


class Accelerator(BaseModel):
    """
    A hardware accelerator offered for deployments.

    ``name``, ``hardware_string``, ``memory``, ``gpu_type`` and ``use_case``
    are computed on the client from the raw fields.
    """

    accelerator_id: str = ""
    pricing: float = 0
    hw_model: str = ""
    hw_link: str = ""
    hw_memory: int = 0
    provider: str = ""
    status: str = ""
    updated_at: str = ""

    name: str = ""
    hardware_string: str = ""
    memory: str = ""
    gpu_type: str = ""
    use_case: str = ""
