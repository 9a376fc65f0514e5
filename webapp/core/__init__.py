"""
Core utilities shared across the webapp API.

This package hosts configuration, structured logging, the error hierarchy,
password hashing, the SMTP mailer and the per-IP rate limiter. Nothing here
depends on repositories or services.
"""
