"""
Document storage layer.

Responsibilities:
- Hold collections and per-user sub-collections in memory.
- Apply partial updates with dotted field paths and atomic increments.
- Hand out copies so request handlers never share mutable state.
"""
