"""Phonebook backend: user accounts and per-user contacts."""
