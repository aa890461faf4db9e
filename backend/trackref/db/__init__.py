"""Database Infrastructure - SQLAlchemy Base and async session factory.

Invariants:
    - All sessions are async (AsyncSession)
"""
