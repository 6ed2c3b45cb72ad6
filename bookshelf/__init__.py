"""
Bookshelf — Application Package
================================

A small HTTP service for managing book records.

Architecture:

    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← method+path dispatch, status codes
    ├─────────────────────────────────────┤
    │     Repositories (Data Access)      │  ← one SQL statement per operation
    ├─────────────────────────────────────┤
    │    Models & Schemas (Data)          │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database (Persistence)          │  ← Async SQLAlchemy engine/sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
