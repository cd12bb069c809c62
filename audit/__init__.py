"""audit/ -- Append-only log of mutating actions.

Layer rule: audit/ imports only stdlib and third-party libraries.
It does NOT import from api/, auth/, inventory/, or client/.
"""
