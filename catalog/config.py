"""
Configuration management for the Product Catalog Builder
Loads settings from YAML files with environment variable overrides
"""

import os
import yaml
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional
from pydantic import BaseModel, Field
from loguru import logger
from reportlab.lib.pagesizes import A4, LETTER


class PageSize(NamedTuple):
    """Page dimensions in points"""
    width: float
    height: float


PAGE_SIZES: Dict[str, PageSize] = {
    'A4': PageSize(*A4),
    'LETTER': PageSize(*LETTER),
}


class AppConfig(BaseModel):
    """Main application configuration"""

    # Flask settings
    SECRET_KEY: str = Field(default_factory=lambda: os.urandom(24).hex())
    FLASK_ENV: str = "development"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # Uploads
    MAX_UPLOAD_SIZE: int = 20 * 1024 * 1024  # 20MB
    ALLOWED_EXTENSIONS: List[str] = [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"]

    # Color sampling
    SAMPLE_GRID_SIZE: int = 40
    BRIGHTNESS_THRESHOLD: float = 180.0

    # Document layout
    PAGE_SIZE: str = "A4"
    PAGE_MARGIN: float = 40.0
    CURRENCY_PREFIX: str = "Rs. "
    # TrueType fonts embedded for text outside Latin-1, such as a rupee sign prefix
    FONT_FILE: Optional[str] = None
    BOLD_FONT_FILE: Optional[str] = None
    OUTPUT_FILENAME: str = "product-catalog.pdf"

    # Sessions
    MAX_SESSIONS: int = 100

    @property
    def page_size(self) -> PageSize:
        """Resolve the configured page size name to dimensions"""
        try:
            return PAGE_SIZES[self.PAGE_SIZE.upper()]
        except KeyError:
            logger.warning(f"Unknown page size {self.PAGE_SIZE}, using A4")
            return PAGE_SIZES['A4']


def load_yaml_config(file_path: str) -> Dict:
    """Load configuration from YAML file"""
    path = Path(file_path)
    if not path.exists():
        logger.debug(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading config file {file_path}: {e}")
        return {}


def load_config(environment: str = "development") -> AppConfig:
    """Load configuration with environment-specific overrides"""

    base_config = load_yaml_config("config/settings.yaml")
    env_config = load_yaml_config(f"config/settings_{environment}.yaml")

    # env overrides base
    config_dict = {**base_config, **env_config}

    env_overrides = {
        'FLASK_ENV': os.getenv('FLASK_ENV', environment),
        'LOG_LEVEL': os.getenv('LOG_LEVEL'),
        'SECRET_KEY': os.getenv('SECRET_KEY'),
        'PAGE_SIZE': os.getenv('PAGE_SIZE'),
    }

    env_overrides = {k: v for k, v in env_overrides.items() if v is not None}
    config_dict.update(env_overrides)

    if 'FLASK_ENV' in config_dict:
        config_dict['DEBUG'] = config_dict['FLASK_ENV'] == 'development'

    try:
        return AppConfig(**config_dict)
    except ValueError as e:
        logger.error(f"Configuration validation error: {e}")
        return AppConfig()


_config_instance = None

def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config(os.getenv('FLASK_ENV', 'development'))
    return _config_instance
