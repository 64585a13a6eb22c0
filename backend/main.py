from __future__ import annotations

import os

import uvicorn

from backend.app.main import app


def run() -> None:
    """Serve Dreamscape with uvicorn, keeping the app's own JSON logging setup."""

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host=host, port=port, log_config=None, proxy_headers=True)


if __name__ == "__main__":
    run()
