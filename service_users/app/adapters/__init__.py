"""
Adapters package for the Users Service.

Contains the HTTP client wrapper for the remote ReqRes user directory. The
adapter encapsulates:

- Base URL, timeout and the optional API-key header
- The fixed retry policy for transient failures
- Translation of exhausted retries into shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .reqres_client import ReqResClient

__all__ = ["ReqResClient"]
