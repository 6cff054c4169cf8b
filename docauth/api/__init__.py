"""HTTP adapter (FastAPI) over the auth store."""
