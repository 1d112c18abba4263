"""Domain layer - machine model, ports and errors."""
