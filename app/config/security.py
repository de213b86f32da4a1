# app/config/security.py
# Security configuration for authentication and input validation

import logging
import os
import secrets
from typing import List

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def load_secret_key() -> str:
    """JWT signing key from SECRET_KEY, or a random one that dies with the process"""
    key = os.getenv("SECRET_KEY")
    if key:
        return key
    logger.warning("SECRET_KEY is not set; using a random key, tokens will not survive a restart")
    return secrets.token_urlsafe(32)


class SecurityConfig:
    """Security configuration for the application"""

    # Token settings
    AUTH = {
        'secret_key': load_secret_key(),
        'algorithm': os.getenv('ALGORITHM', 'HS256'),
        'access_token_expire_minutes': int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', 24 * 60)),
        'token_url': '/auth/login',
    }

    # Password hashing
    PASSWORD = {
        'schemes': ['pbkdf2_sha256'],
        'min_length': int(os.getenv('PASSWORD_MIN_LENGTH', 6)),
    }

    # Field bounds shared by the registries
    VALIDATION = {
        'username_min_length': 3,
        'username_max_length': 50,
        'username_pattern': r'^[a-zA-Z0-9_]+$',
        'email_max_length': 100,
        'team_name_min_length': 1,
        'team_name_max_length': 100,
        'task_title_min_length': 1,
        'task_title_max_length': 200,
    }

    # Security headers
    SECURITY_HEADERS = {
        'X-Content-Type-Options': 'nosniff',
        'X-Frame-Options': 'DENY',
        'X-XSS-Protection': '1; mode=block',
        'Referrer-Policy': 'same-origin',
    }

    @classmethod
    def get_cors_origins(cls) -> List[str]:
        """Get allowed CORS origins from the environment"""
        raw = os.getenv('CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000')
        return [origin.strip() for origin in raw.split(',') if origin.strip()]
