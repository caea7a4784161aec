"""Text normalization and structured evidence records."""
