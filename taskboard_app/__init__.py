"""
Taskboard frontend Flask application factory.

Provides the ``create_app`` factory that assembles the taskboard frontend.
The app is a thin Backend-for-Frontend (BFF): it renders Jinja templates
and drives the client-side data model (session store, task repository,
view-projection helpers) on behalf of the browser.  Whether that model
talks to the remote task API or to in-memory demo data is decided once
here, through :class:`~taskboard_app.services.TaskboardServices`.

Key Concepts Demonstrated:
- Application factory pattern (``create_app``)
- Backend-for-Frontend (BFF) architecture
- Strategy selection at startup instead of per-call mode checks
- Blueprint-based route registration
"""

from __future__ import annotations

import logging

from flask import Flask

from .config import get_config
from .services import TaskboardServices

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None, **overrides) -> Flask:
    """
    Create and configure the taskboard frontend application.

    Args:
        config_name: Optional configuration environment name
            (``"development"``, ``"testing"``, ``"production"``).  When
            *None*, the value is read from the ``FLASK_ENV`` environment
            variable, defaulting to ``"development"``.
        **overrides: Config keys applied after the configuration class,
            e.g. ``TASK_API_URL="http://api"`` to force remote mode.

    Returns:
        A configured :class:`~flask.Flask` application with the selected
        task and auth strategies stored under
        ``app.extensions["taskboard"]``.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.config.update(overrides)

    logger.info("Creating taskboard app with config: %s", config_class.__name__)

    app.extensions["taskboard"] = TaskboardServices(app.config)

    # Import inside the factory to avoid circular imports -- the blueprint
    # module references helpers from this package, which must exist first.
    from .routes.views import views_bp

    app.register_blueprint(views_bp)
    return app
