"""Bracket generation and bracket state management."""
