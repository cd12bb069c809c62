"""auth/ -- Authentication package for StockTrack.

Password hashing, bearer tokens, the user store, the request auth gate and the
register/login service.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/, audit/, inventory/, or client/.
api/ imports from auth/, not the other way around.
"""
