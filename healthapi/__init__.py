"""HTTP surface for Library Health.

Served under /LibraryHealth for listing libraries, running scans and reading
or deleting stored results.
"""

from .router import router

__all__ = ["router"]
