"""
Users Service package for the ReqRes Access Layer.

The service exposes the remote ReqRes user directory over HTTP:
- Fetch-all: walks every page and returns one ordered list
- Fetch-by-id: single user lookup, 404 surfaced to the caller
- Short-lived response cache and retried transport calls

Structure:
- app.main: FastAPI app, routes, and middleware wiring.
- app.adapters: HTTP client for the remote directory.
- app.caching: Cache contract and in-memory TTL cache.
- app.domain: User models and the fetch service.
"""
