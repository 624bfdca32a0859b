# burnnote/models/secret_record.py

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SecretRecord:
    """
    Everything persisted for one message. The private key basis is not here
    and never will be; without it the ciphertext is unrecoverable.
    """

    message_id: str
    ciphertext: bytes
    nonce: bytes
    auth_tag: bytes
    public_value: str   # hex
    prime: str          # hex
    generator: str      # hex
    created_at: datetime
    expires_at: datetime
