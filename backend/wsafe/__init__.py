"""wsafe: personal-safety SOS service."""
