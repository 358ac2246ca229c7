"""gRPC transport layer for the application.

This package hosts:
- Wire stubs (in `stubs/`): JSON-over-gRPC codecs, client stubs and servicer bases.
- Server lifecycle (`server.py`) and interceptors.
- Thin service adapters that map gRPC requests to endpoint sets.
- A gRPC client of the account service (in `clients/`).
"""
