"""Core Layer — domain logic with no IO, no async, no HTTP.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/ or schemas/
    - Backend access only through the Protocols in capability_protocols.py

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
