"""Marketplace FastAPI application.

Processes commands synchronously over HTTP; every request runs inside the
marketplace domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from marketplace.api import create_app
from marketplace.domain import marketplace

# Initialised at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied.
marketplace.init()

app = create_app()
