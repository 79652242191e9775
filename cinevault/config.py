"""
Configuration for the CineVault Flask application.

Values are read from environment variables; a local .env file is loaded
first when present.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Project root directory (parent of the cinevault package)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Config:
    """Default configuration (local development)."""

    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL', 'sqlite:///' + os.path.join(BASE_DIR, 'cinevault.db')
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Environment name reported by /api/v{n}/environment
    APP_ENV = os.getenv('CINEVAULT_ENV', 'Development')


class TestingConfig(Config):
    """In-memory database, errors rendered as JSON instead of propagated."""

    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    APP_ENV = 'Testing'
    PROPAGATE_EXCEPTIONS = False
