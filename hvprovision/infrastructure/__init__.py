"""Infrastructure layer - remote execution, resilience and logging."""
