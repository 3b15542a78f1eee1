"""Infrastructure layer — external framework adapters."""
