from .accelerators import Accelerators
from .chat import ChatCompletions, ChatResource
from .completions import Completions
from .deployments import Deployments
from .embeddings import Embeddings
from .files import Files
from .memory import Memory
from .sandboxes import SandboxResource, Sandboxes, SandboxTemplates
from .vectors import VectorDatabase, VectorIndexes, Vectors

__all__ = [
    "Accelerators",
    "ChatCompletions",
    "ChatResource",
    "Completions",
    "Deployments",
    "Embeddings",
    "Files",
    "Memory",
    "SandboxResource",
    "SandboxTemplates",
    "Sandboxes",
    "VectorDatabase",
    "VectorIndexes",
    "Vectors",
]
