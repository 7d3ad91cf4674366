"""Configuration, policies, errors and shared plumbing."""
