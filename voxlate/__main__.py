"""Entry point serving the translator on localhost."""

import logging

from .ui_web.app import create_app

HOST = "127.0.0.1"
PORT = 8080


def run() -> int:
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    app.run(host=HOST, port=PORT, threaded=True)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(run())
