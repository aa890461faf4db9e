"""Infrastructure - DocumentStore implementations, DB sessions and logging.

Invariants:
    - Only this package talks to SQLAlchemy or holds store state
    - Driver exceptions are mapped to Store*Error before leaving this package
"""
