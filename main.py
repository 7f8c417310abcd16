"""WSGI entrypoint for the recipe planner.

Containerized deployments serve the ``app`` object with Gunicorn. Local
development can use ``flask --app main run`` or ``python main.py``, which
listens on ``PORT``.
"""

import logging
import os

from mealplanner import create_app

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=app.config["PORT"])


__all__ = ["app"]
