"""
Application Configuration

Centralizes Flask, storage and front end settings. Values come from the
environment; a ``.env`` file next to the project is loaded first when present.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Base configuration class."""

    ENV_NAME = os.environ.get('APP_ENV', 'development')

    # Flask settings
    SECRET_KEY = os.environ.get('FLASK_SECRET_KEY', 'development-secret-change-me')

    # Server settings
    PORT = int(os.environ.get('PORT', '5000'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Storage settings
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'firestore')
    GCP_PROJECT = os.environ.get('GCP_PROJECT', 'recipe-planner')
    FIRESTORE_DATABASE = os.environ.get('FIRESTORE_DATABASE')
    RECIPES_COLLECTION = os.environ.get('RECIPES_COLLECTION', 'recipes')
    MEAL_PLANS_COLLECTION = os.environ.get('MEAL_PLANS_COLLECTION', 'meal_plans')

    # Server rendered pages are only mounted when enabled
    SERVE_FRONTEND = _flag('SERVE_FRONTEND')

    # Base URL used by the command line views
    PLANNER_API_URL = os.environ.get('PLANNER_API_URL', 'http://localhost:5000')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SERVE_FRONTEND = _flag('SERVE_FRONTEND', default=True)


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    STORAGE_BACKEND = 'memory'
    SERVE_FRONTEND = True


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment."""
    if env is None:
        env = os.environ.get('APP_ENV', 'development')
    return config.get(env, config['default'])
