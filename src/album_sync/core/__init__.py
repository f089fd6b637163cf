"""Core business logic modules for the album-sync application.

This package contains the reconciliation engine organized by concern:
- sync: strategy resolution, diffing and plan execution
- fetch: collaborators that materialize track files
- filesystem: album folder and track path layout
"""

__all__: list = []
