"""
HTMLVault Backend — Application Package
=========================================

A small HTTP service that stores named HTML documents in PostgreSQL and
exposes create/read/update/delete over JSON.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Validation + SQL) │  ← one statement per operation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy table + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← injected async engine / pool
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
