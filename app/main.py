"""
Server entry point for Paysheet.

Run with:
    uvicorn app.main:app --port 5000
or:
    python -m app.main

The dashboard frontend is a separate project; it talks to this
process over the JSON API and is allowed in through FRONTEND_URL.
"""

import uvicorn

from paysheet.api import create_app
from paysheet.config import get_settings


app = create_app()


if __name__ == "__main__":
    app_settings = get_settings().app
    uvicorn.run(app, host=app_settings.host, port=app_settings.port)
