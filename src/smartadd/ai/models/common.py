"""Common data models for LLM adapters."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """Valid message roles."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseModel):
    """A role-tagged text message."""

    model_config = {"frozen": True}

    role: MessageRole
    content: str


class CompletionRequest(BaseModel):
    """Ordered messages for a single completion. Never mutated after dispatch."""

    model_config = {"frozen": True}

    messages: List[Message]
    temperature: float = 0.0
    max_tokens: Optional[int] = None

    def get_system_message(self) -> Optional[str]:
        """Join all system messages, or None if there are none."""
        system = [m.content for m in self.messages if m.role == MessageRole.SYSTEM]
        return "\n\n".join(system) if system else None

    def get_conversation_messages(self) -> List[Message]:
        """Get all non-system messages."""
        return [msg for msg in self.messages if msg.role != MessageRole.SYSTEM]


class TokenUsage(BaseModel):
    """Token usage statistics."""
    input_tokens: int
    output_tokens: int

    @property
    def total_tokens(self) -> int:
        """Calculate total tokens used."""
        return self.input_tokens + self.output_tokens


class CompletionResponse(BaseModel):
    """Raw model output plus optional metadata."""
    text: str
    model: Optional[str] = None
    usage: Optional[TokenUsage] = None
    finish_reason: Optional[str] = None
    created: datetime = Field(default_factory=datetime.now)
