from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import HttpClient, HttpResponse, LlmGatewayError, call, chat, strip_code_fences

__all__ = ["HttpClient", "HttpResponse", "LlmGatewayError", "call", "chat", "strip_code_fences"]
