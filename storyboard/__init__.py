"""
Storyboard Backend — Application Package Initializer
=====================================================

What: Marks the `storyboard` directory as a Python package.
Who:  Imported by uvicorn (storyboard.main:app), Alembic and pytest.

Architecture Note:
    The backend is layered:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (store, files, auth)     │  ← Business rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The `client` subpackage is the other end of the wire: an httpx-based
    controller that drives the same REST API the browser page uses.
"""

__version__ = "1.0.0"
