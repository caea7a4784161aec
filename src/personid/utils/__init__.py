"""Shared helpers: errors, logging, events, character tables and URLs."""
