"""
Firebase Admin SDK initialisation.

The service account comes either as raw JSON (FIREBASE_SERVICE_ACCOUNT_JSON)
or as a path to the key file (FIREBASE_SERVICE_ACCOUNT_PATH). Without one of
them nothing can be done, so both loaders raise ConfigurationError.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from booking_ops.exceptions import ConfigurationError, IdentityProviderError
from booking_ops.monitoring.logger import get_logger

logger = get_logger(__name__)


def load_service_account(path: Optional[str] = None, raw_json: Optional[str] = None) -> Dict[str, Any]:
    """
    Read the service-account key.

    Args:
        path: Key file path, resolved against the working directory
        raw_json: Key file contents; preferred over ``path`` when both are set

    Raises:
        ConfigurationError: Neither source set, file missing, or invalid JSON
    """
    if raw_json:
        try:
            account = json.loads(raw_json)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid FIREBASE_SERVICE_ACCOUNT_JSON: {e}") from e
        logger.info("Using Firebase credentials from FIREBASE_SERVICE_ACCOUNT_JSON")
        return account

    if not path:
        raise ConfigurationError(
            "FIREBASE_SERVICE_ACCOUNT_PATH not set. Download the service account JSON "
            "from the Firebase console and point FIREBASE_SERVICE_ACCOUNT_PATH at it."
        )

    absolute = Path(path).expanduser().resolve()
    if not absolute.is_file():
        raise ConfigurationError(f"Firebase service account file not found at: {absolute}")

    try:
        account = json.loads(absolute.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Firebase service account file is not valid JSON: {absolute}: {e}") from e

    logger.info("Using Firebase credentials from file", path=str(absolute))
    return account


class IdentityClient:
    """
    The two Firebase Auth calls role assignment needs.

    Firebase failures such as an unknown user surface as
    IdentityProviderError carrying the SDK message.
    """

    def __init__(self, app: firebase_admin.App):
        self.app = app

    def get_uid_by_email(self, email: str) -> str:
        try:
            return auth.get_user_by_email(email, app=self.app).uid
        except (FirebaseError, ValueError) as e:
            raise IdentityProviderError(str(e)) from e

    def set_custom_claims(self, uid: str, claims: Dict[str, Any]) -> None:
        try:
            auth.set_custom_user_claims(uid, claims, app=self.app)
        except (FirebaseError, ValueError) as e:
            raise IdentityProviderError(str(e)) from e


def initialize_firebase(firebase_config) -> IdentityClient:
    """
    Initialise the default Firebase app once and return a client for it.

    Args:
        firebase_config: ``FirebaseConfig`` section of the loaded config
    """
    try:
        app = firebase_admin.get_app()
        logger.debug("Firebase Admin already initialized", project=app.project_id)
        return IdentityClient(app)
    except ValueError:
        pass

    account = load_service_account(
        firebase_config.service_account_path,
        firebase_config.service_account_json,
    )
    try:
        cert = credentials.Certificate(account)
    except ValueError as e:
        raise ConfigurationError(f"Firebase service account is incomplete: {e}") from e

    app = firebase_admin.initialize_app(cert)
    logger.info("Firebase Admin SDK initialized", project=account.get("project_id"))
    return IdentityClient(app)
