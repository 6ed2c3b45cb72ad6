"""
Bookshelf — Data Access Layer
==============================

Each repository encapsulates all SQL for one entity and hands back ORM
objects. Repositories receive their session from a FastAPI dependency, so
tests replace them wholesale through `app.dependency_overrides`.
"""
