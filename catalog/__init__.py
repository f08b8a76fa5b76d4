"""
Product Catalog Builder - Flask Application Factory
Collects a logo, company name and products and renders a print-ready PDF catalog
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional
from flask import Flask
from loguru import logger
from dotenv import load_dotenv

from .config import load_config
from .session import SessionStore


def create_app(config_overrides: Optional[Dict[str, Any]] = None):
    """Flask application factory"""

    load_dotenv()

    app = Flask(__name__)

    environment = os.getenv('FLASK_ENV', 'development')
    config = load_config(environment)
    if config_overrides:
        known = {k: v for k, v in config_overrides.items() if k in type(config).model_fields}
        config = config.model_copy(update=known)
        app.config.update(config_overrides)
    app.config.update(config.model_dump())

    setup_logging(app)

    app.extensions['catalog_config'] = config
    app.extensions['catalog_sessions'] = SessionStore(config)

    from . import routes
    app.register_blueprint(routes.bp)

    logger.info(f"Product Catalog Builder initialized in {config.FLASK_ENV} mode "
                f"(page size {config.PAGE_SIZE})")

    return app


def setup_logging(app):
    """Configure loguru logging"""
    log_level = app.config.get('LOG_LEVEL', 'INFO')
    log_file = app.config.get('LOG_FILE', 'logs/app.log')

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        rotation="1 day",
        retention="30 days",
        level=log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
    )
