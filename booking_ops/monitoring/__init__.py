"""
Logging: structlog setup, secret redaction and the operator console formatter.
"""
