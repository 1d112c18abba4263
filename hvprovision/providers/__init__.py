"""Provider adapters implementing the domain ports over remote PowerShell."""
