"""Repo-root Uvicorn entrypoint.

Allows running the server from the repo root:

    uvicorn app.main:app --port 6969

This simply re-exports the FastAPI app defined in `backend/toi/main.py`.
"""

from backend.toi.main import app  # re-export
