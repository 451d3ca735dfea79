"""
High-level use cases for the phonebook backend.

Each service module orchestrates repositories/adapters to implement
business rules (register a user, activate an account, reset a password).
Controllers should call these services instead of touching the database
or the mailer directly.
"""
