"""Concrete implementations of the engine's storage and notification interfaces."""
