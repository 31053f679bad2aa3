"""Tests for authorization URL construction and callback parsing."""

from urllib.parse import parse_qs, urlparse

import pytest

from authcode.models.errors import ConfigurationError
from authcode.models.flow import AuthorizationRequest, AuthorizationResponse
from authcode.primitives.pkce import derive_challenge


class TestBuildAuthorizationUrl:
    def setup_method(self):
        # Arrange
        self.request = AuthorizationRequest(
            authorization_endpoint="https://example.com/auth",
            client_id="abc",
            redirect_uri="https://app.example/cb",
            state="xyz",
            scopes=("a", "b"),
        )

    def test_required_parameters_are_percent_encoded(self):
        # Act
        url = self.request.build_authorization_url()

        # Assert
        endpoint, query = url.split("?", 1)
        assert endpoint == "https://example.com/auth"
        assert sorted(query.split("&")) == sorted(
            [
                "response_type=code",
                "client_id=abc",
                "redirect_uri=https%3A%2F%2Fapp.example%2Fcb",
                "state=xyz",
                "scope=a%20b",
            ]
        )

    def test_parameter_order_is_stable(self):
        url = self.request.build_authorization_url()

        assert url == (
            "https://example.com/auth?response_type=code&client_id=abc"
            "&redirect_uri=https%3A%2F%2Fapp.example%2Fcb&state=xyz&scope=a%20b"
        )

    def test_identical_inputs_give_identical_urls(self):
        assert (
            self.request.build_authorization_url()
            == self.request.build_authorization_url()
        )

    def test_pkce_parameters_added(self):
        # Arrange
        pkce = derive_challenge("dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk")
        request = AuthorizationRequest(
            authorization_endpoint="https://example.com/auth",
            client_id="abc",
            redirect_uri="https://app.example/cb",
            state="xyz",
            scopes=("openid",),
            pkce=pkce,
        )

        # Act
        query_params = parse_qs(urlparse(request.build_authorization_url()).query)

        # Assert
        assert query_params["code_challenge"] == [
            "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"
        ]
        assert query_params["code_challenge_method"] == ["S256"]

    def test_no_pkce_parameters_without_challenge(self):
        url = self.request.build_authorization_url()

        assert "code_challenge" not in url

    def test_special_characters_in_values_are_encoded(self):
        request = AuthorizationRequest(
            authorization_endpoint="https://example.com/auth",
            client_id="id with space&more",
            redirect_uri="https://app.example/cb?next=/home",
            state="xyz",
            scopes=("https://www.googleapis.com/auth/drive",),
        )

        url = request.build_authorization_url()

        assert "client_id=id%20with%20space%26more" in url
        assert "redirect_uri=https%3A%2F%2Fapp.example%2Fcb%3Fnext%3D%2Fhome" in url
        assert "scope=https%3A%2F%2Fwww.googleapis.com%2Fauth%2Fdrive" in url
        query_params = parse_qs(urlparse(url).query)
        assert query_params["client_id"] == ["id with space&more"]

    def test_empty_scope_list_omits_scope(self):
        request = AuthorizationRequest(
            authorization_endpoint="https://example.com/auth",
            client_id="abc",
            redirect_uri="https://app.example/cb",
            state="xyz",
        )

        assert "scope=" not in request.build_authorization_url()

    def test_endpoint_with_existing_query(self):
        request = AuthorizationRequest(
            authorization_endpoint="https://example.com/auth?tenant=acme",
            client_id="abc",
            redirect_uri="https://app.example/cb",
            state="xyz",
        )

        url = request.build_authorization_url()

        assert url.startswith("https://example.com/auth?tenant=acme&response_type=code")

    def test_extra_params_appended(self):
        request = AuthorizationRequest(
            authorization_endpoint="https://example.com/auth",
            client_id="abc",
            redirect_uri="https://app.example/cb",
            state="xyz",
            extra_params={"access_type": "offline", "prompt": "consent"},
        )

        url = request.build_authorization_url()

        assert url.endswith("&access_type=offline&prompt=consent")

    def test_extra_params_cannot_override_protocol_params(self):
        request = AuthorizationRequest(
            authorization_endpoint="https://example.com/auth",
            client_id="abc",
            redirect_uri="https://app.example/cb",
            state="xyz",
            extra_params={"state": "forged"},
        )

        with pytest.raises(ConfigurationError):
            request.build_authorization_url()

    @pytest.mark.parametrize("scopes", [("",), ("read write",), ("a", "b\tc")])
    def test_malformed_scope_tokens_rejected(self, scopes):
        request = AuthorizationRequest(
            authorization_endpoint="https://example.com/auth",
            client_id="abc",
            redirect_uri="https://app.example/cb",
            state="xyz",
            scopes=scopes,
        )

        with pytest.raises(ConfigurationError):
            request.build_authorization_url()


class TestParseCallbackUrl:
    def test_successful_callback(self):
        # Act
        response = AuthorizationResponse.parse_callback_url(
            "https://app.example/cb?code=auth-code-123&state=xyz"
        )

        # Assert
        assert response.is_success()
        assert not response.is_error()
        assert response.code == "auth-code-123"
        assert response.state == "xyz"

    def test_user_denied_consent(self):
        response = AuthorizationResponse.parse_callback_url(
            "https://app.example/cb?error=access_denied"
            "&error_description=User+denied+access&state=xyz"
        )

        assert response.is_error()
        assert not response.is_success()
        assert response.error == "access_denied"
        assert response.error_description == "User denied access"
        assert response.code is None

    def test_callback_without_parameters(self):
        response = AuthorizationResponse.parse_callback_url("https://app.example/cb")

        assert not response.is_success()
        assert not response.is_error()
        assert response.state is None
