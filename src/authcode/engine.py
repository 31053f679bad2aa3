"""Authorization code flow engine.

Builds authorization URLs (with or without PKCE) and exchanges returned
authorization codes for tokens. The engine holds one immutable
:class:`ProviderConfig` and no mutable state, so a single instance can be
shared across threads.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from authcode.models.config import ProviderConfig
from authcode.models.errors import ConfigurationError, HttpStatusError, JsonParseError
from authcode.models.flow import AuthorizationRequest
from authcode.models.security import (
    AuthorizationRequestMaterial,
    CodeChallengeMethod,
    PKCEChallenge,
)
from authcode.models.tokens import TokenRequest, TokenResponse
from authcode.primitives.entropy import validate_code_verifier
from authcode.primitives.pkce import derive_challenge
from authcode.providers import ProviderProfile, get_profile
from authcode.services.transport import HttpxTokenTransport, RawResponse, TokenTransport

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class OAuth2Engine(Generic[ResponseT]):
    """OAuth 2.0 authorization code flow for one provider.

    The caller generates ``state`` and the PKCE verifier (see
    :class:`AuthorizationRequestMaterial`), persists them, and compares
    ``state`` on callback. The engine never stores either value.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        profile: ProviderProfile | None = None,
        transport: TokenTransport | None = None,
        response_model: type[ResponseT] | None = None,
    ):
        """Initialize the engine.

        Args:
            config: Validated client credentials and endpoints
            profile: Optional provider preset for default scopes, extra
                authorization parameters and flow requirements
            transport: Token endpoint transport, defaults to httpx
            response_model: Schema for the token response; falls back to the
                profile's, then to TokenResponse
        """
        self._config = config
        self._profile = profile
        self._transport = transport or HttpxTokenTransport()
        self._response_model = response_model or (
            profile.response_model if profile else TokenResponse
        )

    @classmethod
    def from_profile(
        cls,
        profile: ProviderProfile | str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        *,
        authorize_endpoint: str | None = None,
        token_endpoint: str | None = None,
        transport: TokenTransport | None = None,
        response_model: type[ResponseT] | None = None,
    ) -> OAuth2Engine[ResponseT]:
        """Create an engine from a provider preset or its name.

        Explicit endpoints override the preset's.

        Raises:
            ConfigurationError: If the profile is unknown or any value invalid
        """
        if isinstance(profile, str):
            profile = get_profile(profile)

        config = ProviderConfig.build(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            authorize_endpoint=authorize_endpoint or profile.authorize_endpoint,
            token_endpoint=token_endpoint or profile.token_endpoint,
        )
        return cls(
            config, profile=profile, transport=transport, response_model=response_model
        )

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def profile(self) -> ProviderProfile | None:
        return self._profile

    def create_authorization_url(
        self, state: str, scopes: Sequence[str] | None = None
    ) -> str:
        """Build the authorization URL without PKCE.

        Args:
            state: Caller-generated state value
            scopes: Scopes to request; None means the profile defaults

        Raises:
            ConfigurationError: If scopes are required but empty, or the
                provider requires PKCE
        """
        if self._profile is not None and self._profile.requires_pkce:
            raise ConfigurationError(
                f"Provider {self._profile.name!r} requires PKCE; "
                "use create_authorization_url_with_pkce"
            )
        return self._build_url(state, scopes, pkce=None)

    def create_authorization_url_with_pkce(
        self,
        state: str,
        code_verifier: str,
        method: str | CodeChallengeMethod = CodeChallengeMethod.S256,
        scopes: Sequence[str] | None = None,
    ) -> str:
        """Build the authorization URL with a PKCE code challenge.

        Args:
            state: Caller-generated state value
            code_verifier: Caller-generated verifier, kept for the exchange
            method: "S256" (recommended) or "plain"
            scopes: Scopes to request; None means the profile defaults

        Raises:
            ConfigurationError: If the verifier or method is invalid, or
                scopes are required but empty
        """
        validate_code_verifier(code_verifier)
        pkce = derive_challenge(code_verifier, method)
        return self._build_url(state, scopes, pkce=pkce)

    def start_authorization(
        self, scopes: Sequence[str] | None = None, pkce: bool = True
    ) -> tuple[str, AuthorizationRequestMaterial]:
        """Generate fresh state (and verifier) and build the matching URL.

        Returns:
            Tuple of (authorization_url, material)
            - authorization_url: URL to redirect the user to
            - material: Persist this until the callback arrives
        """
        material = AuthorizationRequestMaterial.generate(pkce=pkce)
        if material.code_verifier is not None:
            url = self.create_authorization_url_with_pkce(
                material.state, material.code_verifier, scopes=scopes
            )
        else:
            url = self.create_authorization_url(material.state, scopes)
        return url, material

    def validate_authorization_code(
        self, code: str, code_verifier: str | None = None
    ) -> ResponseT:
        """Exchange an authorization code for tokens.

        Makes exactly one request; retry policy is the caller's.

        Args:
            code: Authorization code from the callback
            code_verifier: PKCE verifier used for the authorization URL

        Returns:
            Token response parsed into the configured response model

        Raises:
            ConfigurationError: If the code is empty, or the provider requires
                PKCE and no verifier was given
            NetworkError: If the token endpoint could not be reached
            HttpStatusError: If the token endpoint did not answer 200
            JsonParseError: If the body does not match the response model
        """
        if not code:
            raise ConfigurationError("Authorization code must not be empty")
        if code_verifier is None and self._profile is not None:
            if self._profile.requires_pkce:
                raise ConfigurationError(
                    f"Provider {self._profile.name!r} requires a code_verifier"
                )

        token_request = TokenRequest(
            token_endpoint=self._config.token_endpoint,
            code=code,
            redirect_uri=self._config.redirect_uri,
            client_id=self._config.client_id,
            client_secret=self._config.client_secret.get_secret_value(),
            code_verifier=code_verifier,
        )

        logger.debug(
            f"Exchanging authorization code at {token_request.token_endpoint} "
            f"(client_id={token_request.client_id}, pkce={code_verifier is not None})"
        )

        raw = self._transport.exchange(
            token_request.token_endpoint,
            token_request.to_form_data(),
            token_request.basic_auth_header(),
        )
        return self._parse_token_response(raw)

    def _build_url(
        self,
        state: str,
        scopes: Sequence[str] | None,
        pkce: PKCEChallenge | None,
    ) -> str:
        if not state:
            raise ConfigurationError("state must not be empty")

        if scopes is None:
            scopes = self._profile.default_scopes if self._profile else ()
        if isinstance(scopes, str):
            raise ConfigurationError(
                "scopes must be a sequence of scope tokens, not a string"
            )
        scopes = tuple(scopes)

        if not scopes and self._profile is not None and self._profile.requires_scope:
            raise ConfigurationError(
                f"Provider {self._profile.name!r} requires at least one scope"
            )

        auth_request = AuthorizationRequest(
            authorization_endpoint=self._config.authorize_endpoint,
            client_id=self._config.client_id,
            redirect_uri=self._config.redirect_uri,
            state=state,
            scopes=scopes,
            pkce=pkce,
            extra_params=self._profile.default_extra_params if self._profile else {},
        )
        return auth_request.build_authorization_url()

    def _parse_token_response(self, raw: RawResponse) -> ResponseT:
        """Interpret the raw token endpoint response.

        Non-200 responses are reported without looking at the body; 200
        responses must validate against the response model.
        """
        if raw.status_code != 200:
            logger.warning(
                f"Token exchange failed with {raw.status_code} {raw.reason}".rstrip()
            )
            raise HttpStatusError(
                raw.status_code, raw.reason, raw.body.decode("utf-8", errors="replace")
            )

        try:
            token_response = self._response_model.model_validate_json(raw.body)
        except ValidationError as e:
            # Error details only; the input may contain tokens
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'body'}: {error['msg']}"
                for error in e.errors(include_input=False, include_url=False)
            )
            logger.warning(
                f"Token response did not match {self._response_model.__name__}: "
                f"{details}"
            )
            raise JsonParseError(f"Invalid token response format: {details}") from e

        logger.info("Token exchange successful")
        return token_response
