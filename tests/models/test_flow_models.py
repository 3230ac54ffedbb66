from urllib.parse import parse_qs, urlparse

import pytest

from solid_authn.login.options import IssuerConfig
from solid_authn.models.errors import StorageError
from solid_authn.models.flow import (
    AuthorizationRequest,
    AuthorizationRequestState,
    SessionCorrelationRecord,
    StateRecord,
)
from solid_authn.models.tokens import KeyPair, SessionTokenSet


class TestStateRecord:
    def test_round_trips_through_storage_mapping(self):
        record = StateRecord(session_id="s1")

        assert record.to_storage() == {"sessionId": "s1"}
        assert StateRecord.from_storage({"sessionId": "s1"}) == record

    def test_missing_session_id_raises_storage_error(self):
        with pytest.raises(StorageError, match="sessionId"):
            StateRecord.from_storage({})


class TestSessionCorrelationRecord:
    def test_stringifies_booleans(self):
        # Arrange
        record = SessionCorrelationRecord(
            code_verifier="verifier123",
            issuer="https://idp.example",
            redirect_url="https://app.example/cb",
            dpop_bound=False,
            keep_alive=False,
        )

        # Act
        stored = record.to_storage()

        # Assert
        assert stored["dpop"] == "false"
        assert stored["keepAlive"] == "false"
        assert all(isinstance(value, str) for value in stored.values())

    def test_record_without_keep_alive_keeps_session_alive(self):
        record = SessionCorrelationRecord.from_storage(
            {
                "codeVerifier": "verifier123",
                "issuer": "https://idp.example",
                "redirectUrl": "https://app.example/cb",
                "dpop": "true",
            }
        )

        assert record.dpop_bound is True
        assert record.keep_alive is True

    def test_verifier_is_hidden_from_repr(self):
        record = SessionCorrelationRecord(
            code_verifier="verifier123",
            issuer="https://idp.example",
            redirect_url="https://app.example/cb",
        )

        assert "verifier123" not in repr(record)

    def test_missing_field_raises_storage_error(self):
        with pytest.raises(StorageError, match="codeVerifier"):
            SessionCorrelationRecord.from_storage({"issuer": "https://idp.example"})


class TestAuthorizationRequestState:
    def test_dumps_with_camel_case_keys(self):
        state = AuthorizationRequestState(
            code_verifier="verifier123",
            state="xyz",
            issuer="https://idp.example",
            redirect_url="https://app.example/cb",
            dpop_bound=True,
            client_id="app",
        )

        assert state.model_dump(by_alias=True) == {
            "codeVerifier": "verifier123",
            "state": "xyz",
            "issuer": "https://idp.example",
            "redirectUrl": "https://app.example/cb",
            "dpopBound": True,
            "clientId": "app",
        }
        assert "verifier123" not in repr(state)

    def test_validates_camel_case_payload(self):
        state = AuthorizationRequestState.model_validate(
            {
                "codeVerifier": "verifier123",
                "state": "xyz",
                "issuer": "https://idp.example",
                "redirectUrl": "https://app.example/cb",
                "dpopBound": False,
                "clientId": "app",
            }
        )

        assert state.redirect_url == "https://app.example/cb"


class TestAuthorizationRequest:
    def test_appends_to_endpoint_with_existing_query(self):
        request = AuthorizationRequest(
            authorization_endpoint="https://idp.example/authorize?tenant=a",
            client_id="app",
            redirect_uri="https://app.example/cb",
            code_challenge="challenge",
            code_challenge_method="S256",
            state="xyz",
        )

        query = parse_qs(urlparse(request.build_authorization_url()).query)

        assert query["tenant"] == ["a"]
        assert query["state"] == ["xyz"]
        assert "scope" not in query


class TestSessionTokenSet:
    def test_optional_tokens_default_to_none(self):
        token_set = SessionTokenSet(issuer="https://idp.example", client_id="app")

        assert token_set.access_token is None
        assert token_set.refresh_token is None
        assert not token_set.is_expired()
        assert not token_set.is_dpop_bound()

    def test_accepts_camel_case_payload(self):
        token_set = SessionTokenSet.model_validate(
            {
                "accessToken": "access-token-xyz",
                "webId": "https://alice.example/profile#me",
                "expiresAt": 0,
                "dpopKey": {"privateKey": object(), "publicKey": {"kty": "EC"}},
                "issuer": "https://idp.example",
                "clientId": "app",
            }
        )

        assert token_set.web_id == "https://alice.example/profile#me"
        assert token_set.is_expired()
        assert token_set.is_dpop_bound()
        assert isinstance(token_set.dpop_key, KeyPair)
        assert "access-token-xyz" not in repr(token_set)


class TestIssuerConfig:
    def test_validates_discovery_document(self):
        config = IssuerConfig.model_validate(
            {
                "issuer": "https://idp.example",
                "authorization_endpoint": "https://idp.example/authorize",
                "token_endpoint": "https://idp.example/token",
                "grant_types_supported": ["authorization_code", "refresh_token"],
                "claims_supported": ["sub", "webid"],
            }
        )

        assert config.supports_grant("authorization_code")
        assert not config.supports_grant("client_credentials")

    def test_absent_grant_types_support_nothing(self):
        config = IssuerConfig(
            issuer="https://idp.example",
            authorization_endpoint="https://idp.example/authorize",
            token_endpoint="https://idp.example/token",
        )

        assert config.grant_types_supported is None
        assert not config.supports_grant("authorization_code")
