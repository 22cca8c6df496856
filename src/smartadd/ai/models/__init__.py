"""Request and response models shared by all provider adapters."""

from .common import CompletionRequest, CompletionResponse, Message, MessageRole, TokenUsage

__all__ = ["CompletionRequest", "CompletionResponse", "Message", "MessageRole", "TokenUsage"]
