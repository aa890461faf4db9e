"""Services - async shell composing store reads and writes around the pure core.

Invariants:
    - Every store call is an explicit await; no background tasks, no shared state
    - Failures raise TrackRefError subclasses; ToolDispatch turns them into results
"""
