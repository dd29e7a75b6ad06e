"""
CuriousDog Backend — Application Package Initializer
=====================================================

What: Marks the `app` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is layered the same way for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, actor extraction
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Question lifecycle, visibility, auth
    ├─────────────────────────────────────┤
    │     Repositories (Data Access)      │  ← Question store, user directory
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services never read the current user from global state: the authenticated
    actor is resolved per request by a dependency and passed in explicitly.
"""

__version__ = "1.0.0"
