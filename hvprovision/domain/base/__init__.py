"""Base domain layer - ports shared by the application and the adapters."""
