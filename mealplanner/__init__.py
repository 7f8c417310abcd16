import os
from typing import Optional

from flask import Flask
from werkzeug.exceptions import HTTPException

from .api import api, handle_http_error
from .cli import shopping_list_command, week_command
from .config import get_config
from .memory_storage import MemoryPlannerStorage
from .models import MealPlan, Recipe
from .storage import PlannerStorage

try:
    from .gcp_storage import FirestorePlannerStorage
except ImportError:  # pragma: no cover - allows running tests without optional deps
    FirestorePlannerStorage = None  # type: ignore[assignment]


def create_app(storage: Optional[PlannerStorage] = None, config_name: Optional[str] = None) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    storage:
        Optional planner storage. When ``None`` the backend named by the
        ``STORAGE_BACKEND`` setting is built: :class:`FirestorePlannerStorage`
        configured from the environment, or an empty
        :class:`MemoryPlannerStorage` for ``memory``.
    config_name:
        Name of the configuration class to load (``development``,
        ``production`` or ``testing``). Defaults to ``APP_ENV``.
    """

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))
    # Names without a config class of their own still report as given.
    app.config["ENV_NAME"] = config_name or os.environ.get("APP_ENV", "development")
    app.json.sort_keys = False

    if storage is None:
        storage = _build_storage(app)
    app.config["PLANNER_STORAGE"] = storage

    app.register_blueprint(api)
    app.register_error_handler(HTTPException, handle_http_error)

    if app.config["SERVE_FRONTEND"]:
        from .views import web

        app.register_blueprint(web)

    app.cli.add_command(week_command)
    app.cli.add_command(shopping_list_command)

    app.logger.info(
        "Recipe planner configured (env=%s, storage=%s, frontend=%s)",
        app.config["ENV_NAME"],
        type(storage).__name__,
        app.config["SERVE_FRONTEND"],
    )
    return app


def _build_storage(app: Flask) -> PlannerStorage:
    backend = app.config["STORAGE_BACKEND"]
    if backend == "memory":
        return MemoryPlannerStorage()
    if backend != "firestore":
        raise RuntimeError(f"Unknown STORAGE_BACKEND '{backend}'. Use 'firestore' or 'memory'.")
    if FirestorePlannerStorage is None:
        raise RuntimeError(
            "google-cloud-firestore is not installed. Install it or pass an explicit "
            "storage backend to create_app."
        )
    return FirestorePlannerStorage.from_config(app.config)


__all__ = ["create_app", "MealPlan", "Recipe"]
