"""
asgi.py -- Application assembly for StockTrack.

Adds the /media static mount for product images on top of the API app.
api/main.py stays free of filesystem serving so tests can run the API
without a media directory.

Run with:  uvicorn asgi:app --reload
"""

from fastapi.staticfiles import StaticFiles

from api.main import app
from core.config import get_settings

_settings = get_settings()

# check_dir=False: the directory is created on the first upload.
app.mount("/media", StaticFiles(directory=_settings.media_dir, check_dir=False), name="media")
