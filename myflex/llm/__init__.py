"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Send a system prompt plus optional user content and return the completion.
- Parse JSON-mode answers into dicts.
- Never raise: every failure is logged and reported as ``None`` so the
  calling flow can fall back to its heuristic selection.
"""
