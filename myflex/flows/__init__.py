"""
AI flows.

Each flow builds a prompt from the dish catalog and the user's context,
asks the LLM for a choice, validates that choice against the catalog and
falls back to a heuristic or random selection when the answer is unusable.
"""
