"""Shared utilities (file helpers, logging formatters)."""
