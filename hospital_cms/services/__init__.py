"""Business logic for authentication, user management and auditing."""
