"""Authentication dependencies for write routes."""
