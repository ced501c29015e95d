"""LLM service module.

Provides the language model abstraction layer supporting multiple providers
(Google Gemini, Ollama, NVIDIA, plain REST text endpoints).

Key modules:
- llm.py: Provider factory and client creation
- structured_invoker.py: Timed model calls and JSON recovery from replies
"""
