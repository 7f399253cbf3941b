"""WSGI entry point: ``flask --app app run`` or ``gunicorn app:app``."""

from __future__ import annotations

import os

from account_service.main import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8080")), debug=bool(app.config.get("DEBUG")))
