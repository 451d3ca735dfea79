"""
Core utilities shared across the phonebook backend.

This package hosts:
- configuration helpers (env vars, token lifetimes, SMTP credentials)
- cross-cutting adapters such as logging setup, the SMTP mailer and
  password hashing.

Services depend on these primitives instead of reading os.environ or
talking to smtplib/argon2 directly.
"""
