"""Infrastructure: database sessions, templates and logging setup."""
