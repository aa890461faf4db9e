"""ORM Models - SQLAlchemy declarative models backing the SQL document store.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - Imported here so Base.metadata is populated before create_all or autogenerate
"""

from trackref.models.document_record import DocumentRecord  # noqa: F401
