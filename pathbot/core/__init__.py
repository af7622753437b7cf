"""Shared primitives (prompt context stacking and engine events).

Kept free of FastAPI concerns so it can be reused by API routes, the engine, and tests.
"""
