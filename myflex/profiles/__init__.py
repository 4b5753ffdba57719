"""
User profiles.

Responsibilities:
- Persist user profiles and their owner-editable preference fields.
- Maintain the virtual profile: per-origin and per-category preference
  scores accumulated from dish interactions.
"""
