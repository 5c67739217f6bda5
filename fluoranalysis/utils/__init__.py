"""Shared utilities: logging, validation and parallel execution."""
