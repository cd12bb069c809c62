"""core/ -- Settings shared by every StockTrack package. Imports nothing from the app."""
