import os
from datetime import timedelta

from dotenv import find_dotenv, load_dotenv

# env var -> app.config key
_ENV_KEYS = {
    'CLIENT_ID': 'GOOGLE_CLIENT_ID',
    'CLIENT_SECRETS': 'GOOGLE_CLIENT_SECRET',
    'GOOGLE_CALLBACK_URL': 'GOOGLE_CALLBACK_URL',
    'FACEBOOK_APP_ID': 'FACEBOOK_CLIENT_ID',
    'FACEBOOK_APP_SECRET': 'FACEBOOK_CLIENT_SECRET',
    'FACEBOOK_CALLBACK_URL': 'FACEBOOK_CALLBACK_URL',
}


def _env_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name, default):
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def load_config():
    """
    Build the Flask config mapping from environment variables.

    OAuth credentials left unset disable that provider; callback URLs left
    unset are derived from the request host at redirect time. A .env file
    in the working directory is read first; real environment variables win.
    """
    load_dotenv(find_dotenv(usecwd=True))
    cfg = {
        'SECRET_KEY': os.getenv('SECRET') or 'defaultSecret',
        'SQLALCHEMY_DATABASE_URI': os.getenv('DATABASE_URL') or 'sqlite:///secretboard.db',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'PERMANENT_SESSION_LIFETIME': timedelta(seconds=86400),
        'SESSION_COOKIE_SECURE': _env_bool('SESSION_COOKIE_SECURE'),
        'SESSION_COOKIE_HTTPONLY': True,
        'SESSION_COOKIE_SAMESITE': 'Lax',
        'PORT': _env_int('PORT', 3000),
        'LOG_LEVEL': (os.getenv('LOG_LEVEL') or 'INFO').upper(),
    }
    for env_name, key in _ENV_KEYS.items():
        value = (os.getenv(env_name) or '').strip()
        cfg[key] = value or None
    return cfg
