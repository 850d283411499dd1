"""Prompt bundle models.

This module defines the prompt data structures handed to the model client,
together with the completion options that travel with them.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Message(BaseModel):
    """Single message in LLM conversation."""

    role: str = Field(
        ..., description="Message role: 'system', 'user', or 'assistant'"
    )
    content: str = Field(..., description="Message content")


class CompletionOptions(BaseModel):
    """Per-call options passed across the model client boundary."""

    model: Optional[str] = Field(
        default=None, description="Model override; client default when unset"
    )
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4000, gt=0)
    timeout_ms: int = Field(default=120_000, gt=0)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


class PromptBundle(BaseModel):
    """System/user prompt pair ready for the model client."""

    messages: List[Message] = Field(..., description="Conversation messages")
    options: CompletionOptions = Field(default_factory=CompletionOptions)

    # Metadata for logging and debugging
    mode: str = Field(default="segment", description="Processing mode used")
    estimated_input_tokens: int = Field(
        default=0, description="Estimated input token count"
    )

    @property
    def system_prompt(self) -> str:
        """Extract system prompt from messages."""
        for msg in self.messages:
            if msg.role == "system":
                return msg.content
        return ""

    @property
    def user_prompt(self) -> str:
        """Extract user prompt from messages."""
        for msg in self.messages:
            if msg.role == "user":
                return msg.content
        return ""

    def to_openai_format(self) -> List[Dict[str, str]]:
        """Convert to OpenAI API message format.

        Returns:
            List of message dicts with 'role' and 'content' keys
        """
        return [{"role": m.role, "content": m.content} for m in self.messages]
