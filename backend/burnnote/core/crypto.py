from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import dh
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from dataclasses import dataclass
from typing import Protocol
import logging
import os
import uuid

from burnnote.core.errors import AuthenticationFailed, EntropyUnavailable

logger = logging.getLogger(__name__)

# RFC 3526 2048-bit MODP group 14
MODP_2048_PRIME = int(
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD1"
    "29024E088A67CC74020BBEA63B139B22514A08798E3404DD"
    "EF9519B3CD3A431B302B0A6DF25F14374FE1356D6D51C245"
    "E485B576625E7EC6F44C42E9A637ED6B0BFF5CB6F406B7ED"
    "EE386BFB5A899FA5AE9F24117C4B1FE649286651ECE45B3D"
    "C2007CB8A163BF0598DA48361C55D39A69163FA8FD24CF5F"
    "83655D23DCA3AD961C62F356208552BB9ED529077096966D"
    "670C354E4ABC9804F1746C08CA18217C32905E462E36CE3B"
    "E39E772C180E86039B2783A2EC07A28FB5C55DF06F4C52C9"
    "DE2BCBF6955817183995497CEA956AE515D2261898FA0510"
    "15728E5A8AACAA68FFFFFFFFFFFFFFFF",
    16,
)
MODP_2048_GENERATOR = 2
PRIME_BYTES = 256

AES_KEY_SIZE = 32   # AES-256
NONCE_SIZE = 16     # 128-bit GCM nonce
TAG_SIZE = 16       # 128-bit GCM tag
HKDF_INFO = b"burnnote-v1"


def generate_message_id() -> str:
    return str(uuid.uuid4())


# ---------- KEY MATERIAL ----------

@dataclass(frozen=True)
class KeyMaterial:
    """Ephemeral exchange artifact for one message. Only the public half is persisted."""

    private_scalar: int
    public_value: int
    prime: int
    generator: int

    @property
    def key_basis(self) -> bytes:
        return self.private_scalar.to_bytes(PRIME_BYTES, "big")

    @property
    def decryption_key(self) -> str:
        """Hex form of the key basis, handed to the message creator exactly once."""
        return self.key_basis.hex()

    def __repr__(self) -> str:
        return f"KeyMaterial(public_value={self.public_value:x}, generator={self.generator})"


class KeyBasisSource(Protocol):
    def generate(self) -> KeyMaterial:
        ...


def _random_bytes(length: int) -> bytes:
    try:
        return os.urandom(length)
    except (OSError, NotImplementedError) as e:
        logger.critical("OS random source unavailable: %s", e)
        raise EntropyUnavailable() from e


class KeyMaterialGenerator:
    """
    Finite-field DH key material over a fixed standardized group.

    The creator keeps only the private scalar; no peer public value is ever
    received, so the scalar itself is the key basis.
    """

    def __init__(self, prime: int = MODP_2048_PRIME, generator: int = MODP_2048_GENERATOR):
        self.prime = prime
        self.generator = generator

    def generate(self) -> KeyMaterial:
        # Scalar in [2, p - 2]
        raw = int.from_bytes(_random_bytes(PRIME_BYTES), "big")
        private_scalar = raw % (self.prime - 3) + 2
        public_value = pow(self.generator, private_scalar, self.prime)
        return KeyMaterial(
            private_scalar=private_scalar,
            public_value=public_value,
            prime=self.prime,
            generator=self.generator,
        )

    def compute_shared_secret(self, key_basis: bytes, peer_public_value: int) -> bytes:
        """
        Two-party DH: combine our key basis with a peer public value.
        Output is usable as a key basis for CipherEngine.
        """
        # Reject the small-subgroup values 0, 1 and p - 1
        if not 1 < peer_public_value < self.prime - 1:
            raise ValueError("Peer public value is outside the group")

        private_scalar = int.from_bytes(key_basis, "big")
        shared = pow(peer_public_value, private_scalar, self.prime)
        return shared.to_bytes(PRIME_BYTES, "big")

    def parameter_numbers(self) -> dh.DHParameterNumbers:
        """The group as `cryptography` DH parameter numbers, for interop with its DH API."""
        return dh.DHParameterNumbers(self.prime, self.generator)


# ---------- ENCRYPTION ----------

@dataclass(frozen=True)
class EncryptedPayload:
    ciphertext: bytes
    nonce: bytes
    auth_tag: bytes


def derive_key(key_basis: bytes) -> bytes:
    """
    HKDF-SHA256 -> 32-byte AES-256 key. Short bases are rejected, never padded.
    """
    if len(key_basis) < AES_KEY_SIZE:
        raise ValueError(f"Key basis must be at least {AES_KEY_SIZE} bytes")

    return HKDF(
        algorithm=hashes.SHA256(),
        length=AES_KEY_SIZE,
        salt=None,
        info=HKDF_INFO,
    ).derive(key_basis)


class CipherEngine:
    """AES-256-GCM with a fresh 16-byte nonce per call and a detached 16-byte tag."""

    def encrypt(self, plaintext: bytes, key_basis: bytes) -> EncryptedPayload:
        aesgcm = AESGCM(derive_key(key_basis))
        nonce = _random_bytes(NONCE_SIZE)
        sealed = aesgcm.encrypt(nonce, plaintext, None)
        return EncryptedPayload(
            ciphertext=sealed[:-TAG_SIZE],
            nonce=nonce,
            auth_tag=sealed[-TAG_SIZE:],
        )

    def decrypt(self, record, key_basis: bytes) -> bytes:
        """
        Decrypt anything carrying ciphertext/nonce/auth_tag (an EncryptedPayload
        or a SecretRecord). Any failure to authenticate raises AuthenticationFailed.
        """
        try:
            key = derive_key(key_basis)
        except ValueError as e:
            raise AuthenticationFailed() from e

        if len(record.auth_tag) != TAG_SIZE:
            raise AuthenticationFailed()

        try:
            return AESGCM(key).decrypt(
                record.nonce, record.ciphertext + record.auth_tag, None
            )
        except (InvalidTag, ValueError) as e:
            raise AuthenticationFailed() from e
