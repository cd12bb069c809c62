"""inventory/ -- Product records and their images.

Layer rule: inventory/ imports only stdlib and third-party libraries.
It does NOT import from api/, auth/, audit/, or client/.
"""
