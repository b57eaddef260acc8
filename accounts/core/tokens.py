from datetime import UTC, datetime

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError
from pydantic import ValidationError

from accounts.core.exceptions.access import (
    InvalidSignatureError,
    TokenExpiredError,
    TokenMalformedError,
)
from accounts.core.keys import KeyMaterialManager
from accounts.schemas.token import Claims


class TokenService:
    """
    Builds and parses signed JWTs.

    Receives the key material by constructor; signs with the private key and
    verifies with the public key only. Neither operation touches any state
    besides reading the wall clock.
    """

    def __init__(self, keys: KeyMaterialManager):
        self._keys = keys
        self._signing_key = keys.signing_key_pem.decode()
        self._verification_key = keys.public_key_pem.decode()

    @property
    def algorithm(self) -> str:
        return self._keys.ALGORITHM

    @property
    def public_key_pem(self) -> bytes:
        return self._keys.public_key_pem

    def encode(self, claims: Claims) -> str:
        """
        Serialize and sign claims as a compact JWS.

        Args:
            claims: Claims to sign

        Returns:
            str: Signed token
        """
        return jwt.encode(
            claims.model_dump(mode="json"),
            self._signing_key,
            algorithm=self.algorithm,
        )

    def decode(self, token: str) -> Claims:
        """
        Verify a token and return its claims.

        Args:
            token: Signed token, with or without a "Bearer " prefix

        Returns:
            Claims: Verified claims

        Raises:
            TokenMalformedError: If the token is not a well formed JWT with our claims
            InvalidSignatureError: If the signature does not verify with our public key
            TokenExpiredError: If `exp` is not in the future
        """
        token = token.removeprefix("Bearer ").strip()

        # Structure first, so a bad signature is not confused with garbage input
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise TokenMalformedError(exception=e)

        try:
            payload = jwt.decode(token, self._verification_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError(exception=e)
        except JWTClaimsError as e:
            raise TokenMalformedError(exception=e)
        except JWTError as e:
            raise InvalidSignatureError(exception=e)

        try:
            claims = Claims.model_validate(payload)
        except ValidationError as e:
            raise TokenMalformedError(exception=e)

        if claims.exp <= int(datetime.now(UTC).timestamp()):
            raise TokenExpiredError()

        return claims

    def is_valid(self, token: str) -> bool:
        """
        Check if the token would currently be accepted.

        Note that the token might expire right after this returns.
        """
        try:
            self.decode(token)
        except (TokenMalformedError, InvalidSignatureError, TokenExpiredError):
            return False

        return True
