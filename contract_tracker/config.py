"""
Contract Tracker - Configuration
Settings read from environment variables, loaded into Flask via from_object.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).parent.parent


class Config:
    """Default application configuration."""

    SECRET_KEY = os.environ.get('SECRET_KEY', 'contract-tracker-dev-key')

    # Storage
    DATABASE_PATH = Path(os.environ.get('CONTRACT_TRACKER_DB', BASE_DIR / 'data' / 'contracts.db'))
    UPLOAD_DIR = Path(os.environ.get('CONTRACT_TRACKER_UPLOADS', BASE_DIR / 'uploads'))
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024

    # Analysis
    YEARLY_PAYMENT_POLICY = os.environ.get('YEARLY_PAYMENT_POLICY', 'lump_sum')
    TOP_CONTRACTS_LIMIT = int(os.environ.get('TOP_CONTRACTS_LIMIT', 5))
