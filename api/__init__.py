"""api/ -- FastAPI application and REST routes for StockTrack."""
