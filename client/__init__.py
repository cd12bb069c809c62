"""client/ -- Python HTTP client for the StockTrack API.

Layer rule: client/ talks to the server over HTTP only. It does NOT import
from api/, auth/, audit/, or inventory/.
"""
