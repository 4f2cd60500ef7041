"""Request dependencies: authentication and rate limiting."""
