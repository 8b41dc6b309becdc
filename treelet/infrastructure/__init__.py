"""
Cross-cutting infrastructure for Treelet: logging, errors, retries
and rate limiting.
"""
