"""Domain services: contacts, triggers, episode engine."""
