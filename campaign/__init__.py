"""Campaign events service."""
