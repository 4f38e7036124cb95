"""Shared domain primitives (errors, document queries, ports)."""
