import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests
from flask import Blueprint, abort, current_app, redirect, request, session, url_for
from sqlalchemy.exc import SQLAlchemyError

from .auth import start_session
from .models import db, User, PROVIDER_GOOGLE, PROVIDER_FACEBOOK

oauth_bp = Blueprint('oauth', __name__, url_prefix='/auth')

HTTP_TIMEOUT = 10

PROVIDERS: Dict[str, Dict[str, str]] = {
    PROVIDER_GOOGLE: {
        'authorize_url': 'https://accounts.google.com/o/oauth2/v2/auth',
        'token_url': 'https://oauth2.googleapis.com/token',
        'profile_url': 'https://openidconnect.googleapis.com/v1/userinfo',
        'scope': 'openid profile email',
        'id_column': 'google_id',
    },
    PROVIDER_FACEBOOK: {
        'authorize_url': 'https://www.facebook.com/v19.0/dialog/oauth',
        'token_url': 'https://graph.facebook.com/v19.0/oauth/access_token',
        'profile_url': 'https://graph.facebook.com/me',
        'scope': 'email',
        'id_column': 'facebook_id',
    },
}


class OAuthError(Exception):
    """Provider-side failure during the authorization code flow."""


@dataclass(frozen=True)
class OAuthProfile:
    provider: str
    id: str
    display_name: Optional[str]
    email: Optional[str]


def _state_key(provider: str) -> str:
    return f'oauth_state_{provider}'


def _client_credentials(provider: str):
    key = provider.upper()
    return current_app.config.get(f'{key}_CLIENT_ID'), current_app.config.get(f'{key}_CLIENT_SECRET')


def provider_enabled(provider: str) -> bool:
    client_id, client_secret = _client_credentials(provider)
    return bool(client_id and client_secret)


def enabled_providers():
    return [p for p in PROVIDERS if provider_enabled(p)]


def callback_url(provider: str) -> str:
    configured = current_app.config.get(f'{provider.upper()}_CALLBACK_URL')
    return configured or url_for('oauth.callback', provider=provider, _external=True)


def build_authorize_url(provider: str, *, state: str) -> str:
    meta = PROVIDERS[provider]
    client_id, _ = _client_credentials(provider)
    params = {
        'client_id': client_id,
        'redirect_uri': callback_url(provider),
        'response_type': 'code',
        'scope': meta['scope'],
        'state': state,
    }
    return f"{meta['authorize_url']}?{urlencode(params)}"


def exchange_code(provider: str, code: str) -> str:
    """
    Trade the authorization code for an access token.
    Google wants a form POST, the Graph API takes the same fields as a GET.
    """
    meta = PROVIDERS[provider]
    client_id, client_secret = _client_credentials(provider)
    payload = {
        'client_id': client_id,
        'client_secret': client_secret,
        'redirect_uri': callback_url(provider),
        'code': code,
    }
    if provider == PROVIDER_GOOGLE:
        payload['grant_type'] = 'authorization_code'
        r = requests.post(meta['token_url'], data=payload, timeout=HTTP_TIMEOUT)
    else:
        r = requests.get(meta['token_url'], params=payload, timeout=HTTP_TIMEOUT)
    if r.status_code >= 400:
        # don't echo the body, it can contain the client secret on some errors
        raise OAuthError(f'Token exchange failed (status={r.status_code})')
    data = r.json()
    token = data.get('access_token') if isinstance(data, dict) else None
    if not token:
        raise OAuthError('Token response missing access_token')
    return str(token)


def _parse_profile(provider: str, data: Dict[str, Any]) -> OAuthProfile:
    # Google userinfo uses `sub`, Graph API uses `id`
    raw_id = data.get('sub') if provider == PROVIDER_GOOGLE else data.get('id')
    if not raw_id:
        raise OAuthError('Profile response missing user id')
    name = data.get('name')
    email = data.get('email')
    return OAuthProfile(
        provider=provider,
        id=str(raw_id),
        display_name=str(name) if name else None,
        email=str(email).strip().lower() if email else None,
    )


def fetch_profile(provider: str, access_token: str) -> OAuthProfile:
    meta = PROVIDERS[provider]
    params = None
    if provider == PROVIDER_FACEBOOK:
        params = {'fields': 'id,name,email'}
    r = requests.get(
        meta['profile_url'],
        params=params,
        headers={'Authorization': f'Bearer {access_token}'},
        timeout=HTTP_TIMEOUT,
    )
    if r.status_code >= 400:
        raise OAuthError(f'Profile fetch failed (status={r.status_code})')
    data = r.json()
    if not isinstance(data, dict):
        raise OAuthError('Invalid profile response')
    return _parse_profile(provider, data)


def find_or_create_user(profile: OAuthProfile) -> User:
    """Reuse the account bound to this provider id, or create one from the profile."""
    column = getattr(User, PROVIDERS[profile.provider]['id_column'])
    user = User.query.filter(column == profile.id).first()
    if user is not None:
        return user
    user = User(
        name=profile.display_name,
        email=profile.email,
        provider=profile.provider,
    )
    setattr(user, PROVIDERS[profile.provider]['id_column'], profile.id)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info('Created %s user id=%s', profile.provider, user.id)
    return user


def _known_provider(provider: str) -> str:
    if provider not in PROVIDERS:
        abort(404)
    return provider


@oauth_bp.route('/<provider>')
def authorize(provider):
    provider = _known_provider(provider)
    if not provider_enabled(provider):
        current_app.logger.warning('%s login requested but not configured', provider)
        return redirect(url_for('auth.login'))
    state = secrets.token_urlsafe(24)
    session[_state_key(provider)] = state
    return redirect(build_authorize_url(provider, state=state))


@oauth_bp.route('/<provider>/secrets')
def callback(provider):
    provider = _known_provider(provider)
    if not provider_enabled(provider):
        current_app.logger.warning('%s callback hit but provider not configured', provider)
        return redirect(url_for('auth.login'))

    expected_state = session.pop(_state_key(provider), None)
    try:
        if request.args.get('error'):
            raise OAuthError(f"Provider returned error: {request.args.get('error')}")
        state = request.args.get('state')
        if not expected_state or not state or not secrets.compare_digest(state, expected_state):
            raise OAuthError('State mismatch')
        code = request.args.get('code')
        if not code:
            raise OAuthError('Callback missing code')
        token = exchange_code(provider, code)
        profile = fetch_profile(provider, token)
        user = find_or_create_user(profile)
    except (OAuthError, requests.RequestException, ValueError):
        current_app.logger.exception('%s login failed', provider)
        return redirect(url_for('auth.login'))
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('%s login failed while saving user', provider)
        return redirect(url_for('auth.login'))

    start_session(user)
    return redirect(url_for('pages.secrets'))
