from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel


class CompletionChoice(BaseModel):
    text: str = ""
    index: int = 0
    logprobs: Optional[Dict[str, Any]] = None
    finish_reason: Optional[str] = None


class CompletionUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Completion(BaseModel):
    """
    Legacy text completion, also used for every streamed chunk.
    """

    id: str
    object: Literal["text_completion", "text_completion.chunk"]
    created: int
    model: str
    choices: List[CompletionChoice]
    usage: Optional[CompletionUsage] = None
