from dataclasses import dataclass
from pathlib import Path

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from loguru import logger

from accounts.core.exceptions.access import InvalidSignatureError, KeyMalformedError

RSA_KEY_SIZE = 4096
RSA_PUBLIC_EXPONENT = 65537


@dataclass(frozen=True)
class KeyPair:
    """RSA private key and the PEM encoding of its public half."""

    private_key: rsa.RSAPrivateKey
    public_pem: bytes


class KeyMaterialManager:
    """
    Owns the asymmetric key pair used to sign and verify JWTs.

    The private key never leaves this object except as the signing key handed
    to the token service. The public key is exposed as immutable PEM bytes so
    third parties can verify issued tokens on their own.

    Example:
        ```python
        keys = KeyMaterialManager.generate()
        signature = keys.sign(b"payload")
        keys.verify(b"payload", signature)
        ```
    """

    ALGORITHM = "RS256"

    def __init__(self, key_pair: KeyPair):
        self._key_pair = key_pair
        self._private_pem = key_pair.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    @staticmethod
    def _key_pair_from_private_key(private_key: rsa.RSAPrivateKey) -> KeyPair:
        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return KeyPair(private_key=private_key, public_pem=public_pem)

    @classmethod
    def generate(cls) -> "KeyMaterialManager":
        """
        Generate a fresh RSA-4096 key pair.

        Returns:
            KeyMaterialManager: Manager owning the new key pair
        """
        private_key = rsa.generate_private_key(
            public_exponent=RSA_PUBLIC_EXPONENT,
            key_size=RSA_KEY_SIZE,
        )
        logger.info(f"Generated a new {RSA_KEY_SIZE}-bit RSA key pair")
        return cls(cls._key_pair_from_private_key(private_key))

    @classmethod
    def load(cls, data: bytes, password: bytes | None = None) -> "KeyMaterialManager":
        """
        Load a PEM encoded RSA private key.

        Args:
            data: PEM encoded private key (PKCS#1 or PKCS#8)
            password: Password if the key is encrypted

        Returns:
            KeyMaterialManager: Manager owning the loaded key pair

        Raises:
            KeyMalformedError: If the bytes are not a valid RSA private key
        """
        try:
            private_key = serialization.load_pem_private_key(data, password=password)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyMalformedError(exception=e)

        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise KeyMalformedError(f"Expected an RSA private key, got {type(private_key).__name__}")

        return cls(cls._key_pair_from_private_key(private_key))

    @classmethod
    def from_file(cls, path: Path, password: bytes | None = None) -> "KeyMaterialManager":
        """Load the private key stored at `path`."""
        return cls.load(path.read_bytes(), password=password)

    @classmethod
    def load_or_generate(cls, path: Path | None) -> "KeyMaterialManager":
        """
        Load the key pair from `path` when it exists, otherwise generate one.

        A generated key is written to `path` when a path is given so the next
        process start reuses it.
        """
        if path is not None and path.is_file():
            logger.info(f"Loading JWT private key from {path}")
            return cls.from_file(path)

        manager = cls.generate()

        if path is not None:
            manager.save(path)
            logger.info(f"JWT private key written to {path}")

        return manager

    def save(self, path: Path) -> None:
        """Write the private key to `path`, readable by the owner only"""
        path.parent.mkdir(parents=True, exist_ok=True)
        # Restrict the file before any key bytes land in it
        path.touch(mode=0o600, exist_ok=True)
        path.chmod(0o600)
        path.write_bytes(self._private_pem)

    @property
    def key_pair(self) -> KeyPair:
        return self._key_pair

    @property
    def public_key_pem(self) -> bytes:
        return self._key_pair.public_pem

    @property
    def signing_key_pem(self) -> bytes:
        return self._private_pem

    def sign(self, payload: bytes) -> bytes:
        """Sign `payload` with RSASSA-PKCS1-v1_5 and SHA-256 (the RS256 primitive)."""
        return self._key_pair.private_key.sign(payload, padding.PKCS1v15(), hashes.SHA256())

    def verify(self, payload: bytes, signature: bytes) -> None:
        """
        Verify a signature produced by `sign`.

        Raises:
            InvalidSignatureError: If the signature does not match the payload
        """
        try:
            self._key_pair.private_key.public_key().verify(
                signature, payload, padding.PKCS1v15(), hashes.SHA256()
            )
        except InvalidSignature as e:
            raise InvalidSignatureError(exception=e)
