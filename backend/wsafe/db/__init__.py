"""Database plumbing."""
