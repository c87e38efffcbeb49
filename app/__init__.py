"""Transcript Board application package.

This package contains the FastAPI routes, the in-memory transcript store and
the producer-side feed client for the Transcript Board backend. Subpackages
include:
- api: FastAPI route definitions
- core: configuration, logging and error handling
- services: transcript store and feed client
- schemas: Pydantic models
"""

__all__ = [
    "api",
    "core",
    "services",
    "schemas",
]

__version__ = "1.0.0"
