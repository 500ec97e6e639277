"""
Service-account loading and Firebase Admin initialisation.
"""
import json
from unittest import mock

import pytest

from booking_ops.config.config import FirebaseConfig
from booking_ops.exceptions import ConfigurationError, IdentityProviderError
from booking_ops.identity import firebase
from booking_ops.identity.firebase import IdentityClient, initialize_firebase, load_service_account

ACCOUNT = {"type": "service_account", "project_id": "booking-test", "client_email": "svc@booking-test.iam"}


class TestLoadServiceAccount:

    def test_unset_is_fatal(self):
        with pytest.raises(ConfigurationError, match="FIREBASE_SERVICE_ACCOUNT_PATH not set"):
            load_service_account(None, None)

    def test_missing_file_is_fatal(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_service_account(str(tmp_path / "missing.json"))

    def test_invalid_json_file_is_fatal(self, tmp_path):
        path = tmp_path / "key.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_service_account(str(path))

    def test_reads_file(self, tmp_path):
        path = tmp_path / "key.json"
        path.write_text(json.dumps(ACCOUNT))
        assert load_service_account(str(path)) == ACCOUNT

    def test_raw_json_preferred(self, tmp_path):
        assert load_service_account(str(tmp_path / "missing.json"), json.dumps(ACCOUNT)) == ACCOUNT

    def test_invalid_raw_json_is_fatal(self):
        with pytest.raises(ConfigurationError, match="FIREBASE_SERVICE_ACCOUNT_JSON"):
            load_service_account(None, "{")


class TestInitializeFirebase:

    def test_initialises_once_from_credentials(self, tmp_path):
        path = tmp_path / "key.json"
        path.write_text(json.dumps(ACCOUNT))
        app = mock.MagicMock()

        with mock.patch.object(firebase.firebase_admin, "get_app", side_effect=ValueError("no app")), \
                mock.patch.object(firebase.credentials, "Certificate") as cert, \
                mock.patch.object(firebase.firebase_admin, "initialize_app", return_value=app) as init:
            client = initialize_firebase(FirebaseConfig(service_account_path=str(path)))

        cert.assert_called_once_with(ACCOUNT)
        init.assert_called_once_with(cert.return_value)
        assert isinstance(client, IdentityClient)
        assert client.app is app

    def test_reuses_existing_app(self):
        app = mock.MagicMock()
        with mock.patch.object(firebase.firebase_admin, "get_app", return_value=app), \
                mock.patch.object(firebase.firebase_admin, "initialize_app") as init:
            client = initialize_firebase(FirebaseConfig())
        init.assert_not_called()
        assert client.app is app

    def test_missing_credentials_abort_before_init(self):
        with mock.patch.object(firebase.firebase_admin, "get_app", side_effect=ValueError("no app")), \
                mock.patch.object(firebase.firebase_admin, "initialize_app") as init:
            with pytest.raises(ConfigurationError):
                initialize_firebase(FirebaseConfig())
        init.assert_not_called()

    def test_incomplete_certificate_is_configuration_error(self):
        with mock.patch.object(firebase.firebase_admin, "get_app", side_effect=ValueError("no app")), \
                mock.patch.object(firebase.credentials, "Certificate", side_effect=ValueError("missing private_key")):
            with pytest.raises(ConfigurationError, match="incomplete"):
                initialize_firebase(FirebaseConfig(service_account_json=json.dumps(ACCOUNT)))


class TestIdentityClient:

    def test_delegates_to_firebase_auth(self):
        app = mock.MagicMock()
        client = IdentityClient(app)
        with mock.patch.object(firebase.auth, "get_user_by_email") as get_user, \
                mock.patch.object(firebase.auth, "set_custom_user_claims") as set_claims:
            get_user.return_value.uid = "uid-1"
            assert client.get_uid_by_email("a@example.com") == "uid-1"
            client.set_custom_claims("uid-1", {"role": "staff"})

        get_user.assert_called_once_with("a@example.com", app=app)
        set_claims.assert_called_once_with("uid-1", {"role": "staff"}, app=app)

    def test_firebase_errors_become_identity_provider_error(self):
        client = IdentityClient(mock.MagicMock())
        missing = firebase.auth.UserNotFoundError("No user record found for the provided email: x@example.com")
        with mock.patch.object(firebase.auth, "get_user_by_email", side_effect=missing):
            with pytest.raises(IdentityProviderError, match="No user record found"):
                client.get_uid_by_email("x@example.com")

    def test_rejected_claims_become_identity_provider_error(self):
        client = IdentityClient(mock.MagicMock())
        with mock.patch.object(firebase.auth, "set_custom_user_claims", side_effect=ValueError("Claim \"sub\" is reserved")):
            with pytest.raises(IdentityProviderError, match="reserved"):
                client.set_custom_claims("uid-1", {"sub": "x"})
