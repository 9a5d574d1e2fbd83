"""Output writers for manual runs."""
