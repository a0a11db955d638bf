# services/content/__init__.py
"""content service package initializer: explicit exports only; no runtime side effects."""

__all__ = ["app", "routes", "provider", "remote_store", "static_loader", "discovery", "merge", "query", "records", "leaf"]
