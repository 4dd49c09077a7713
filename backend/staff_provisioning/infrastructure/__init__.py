"""Infrastructure Layer — backend clients and cross-cutting concerns.

Invariants:
    - All backend failures mapped to BackendAPIError (core/errors.py)
"""
