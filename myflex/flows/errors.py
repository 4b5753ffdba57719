from __future__ import annotations


class NoDishesAvailable(RuntimeError):
    """The dish catalog is empty, so nothing can be suggested."""


class FlowError(RuntimeError):
    """An AI flow without a meaningful fallback could not produce a result."""
