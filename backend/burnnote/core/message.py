import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from burnnote.config import Settings
from burnnote.core.crypto import (
    CipherEngine,
    KeyBasisSource,
    KeyMaterialGenerator,
    generate_message_id,
)
from burnnote.core.errors import (
    AuthenticationFailed,
    Expired,
    InvalidKey,
    NotFound,
    ValidationError,
)
from burnnote.core.message_logic import expiry_for, is_expired, utcnow
from burnnote.core.store import MessageStore
from burnnote.models.secret_record import SecretRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreatedMessage:
    message_id: str
    decryption_key: str
    expires_at: datetime
    access_url: str


@dataclass(frozen=True)
class MessageMetadata:
    message_id: str
    public_value: str
    prime: str
    generator: str
    requires_key: bool = True


def parse_decryption_key(candidate_key: str) -> bytes:
    """Hex decryption key -> key basis bytes. Malformed keys are just wrong keys."""
    try:
        return bytes.fromhex(candidate_key.strip())
    except ValueError as e:
        raise InvalidKey() from e


class MessageService:
    """
    create -> fetch_metadata -> decrypt over an injected store.

    Holds no mutable state of its own; records are immutable once written and
    expiry is re-checked against the clock on every read.
    """

    def __init__(
        self,
        store: MessageStore,
        settings: Settings,
        generator: Optional[KeyBasisSource] = None,
        cipher: Optional[CipherEngine] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.settings = settings
        self.generator = generator or KeyMaterialGenerator()
        self.cipher = cipher or CipherEngine()
        self.clock = clock

    def create(self, plaintext: Optional[str]) -> CreatedMessage:
        if not plaintext:
            raise ValidationError("Message content is required")

        try:
            encoded = plaintext.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValidationError("Message content must be valid UTF-8") from e

        key_material = self.generator.generate()
        payload = self.cipher.encrypt(encoded, key_material.key_basis)

        created_at = self.clock()
        record = SecretRecord(
            message_id=generate_message_id(),
            ciphertext=payload.ciphertext,
            nonce=payload.nonce,
            auth_tag=payload.auth_tag,
            public_value=format(key_material.public_value, "x"),
            prime=format(key_material.prime, "x"),
            generator=format(key_material.generator, "x"),
            created_at=created_at,
            expires_at=expiry_for(created_at),
        )
        self.store.put(record)
        logger.info("Created message %s (expires %s)", record.message_id, record.expires_at.isoformat())

        return CreatedMessage(
            message_id=record.message_id,
            decryption_key=key_material.decryption_key,
            expires_at=record.expires_at,
            access_url=f"{self.settings.public_base_path}/{record.message_id}",
        )

    def _load_readable(self, message_id: str) -> SecretRecord:
        record = self.store.get(message_id)
        if record is None:
            raise NotFound()
        if is_expired(record, self.clock()):
            logger.info("Refused expired message %s", message_id)
            raise Expired()
        return record

    def fetch_metadata(self, message_id: str) -> MessageMetadata:
        record = self._load_readable(message_id)
        return MessageMetadata(
            message_id=record.message_id,
            public_value=record.public_value,
            prime=record.prime,
            generator=record.generator,
        )

    def decrypt(self, message_id: str, candidate_key: Optional[str]) -> str:
        if not candidate_key or not candidate_key.strip():
            raise ValidationError("Decryption key is required")

        record = self._load_readable(message_id)
        key_basis = parse_decryption_key(candidate_key)

        try:
            plaintext = self.cipher.decrypt(record, key_basis)
        except AuthenticationFailed as e:
            logger.warning("Decryption failed for message %s", message_id)
            raise InvalidKey() from e

        if self.settings.delete_after_read:
            # Best effort: a concurrent decrypt may already have read the row
            self.store.delete(message_id)
            logger.info("Deleted message %s after read", message_id)

        return plaintext.decode("utf-8")
