"""
Name: ASGI Entrypoint (docauth.main)

Responsibilities:
  - Re-export the app factory for ASGI servers and tooling
  - Provide a `docauth` console command that serves the API with uvicorn

Collaborators:
  - docauth.api.main.create_app
  - uvicorn (factory mode: `uvicorn docauth.main:create_app --factory`)

Notes/Constraints:
  - There is no module-level app: every server process builds its own store
    through the factory.
"""

import os

import uvicorn

from docauth.api.main import create_app

__all__ = ["create_app", "run"]


def run() -> None:
    uvicorn.run(
        "docauth.main:create_app",
        factory=True,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        # Single worker: users live in this process's memory only.
        workers=1,
    )
