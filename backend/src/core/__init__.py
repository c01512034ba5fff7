"""Configuration, authentication, tokens and rate limiting."""
