from sqlalchemy import Column, String, Text, LargeBinary, DateTime
from datetime import timezone
from burnnote.models.base import Base
from burnnote.models.secret_record import SecretRecord


class Message(Base):
    __tablename__ = "messages"

    # uuid4 string generated by the service, never by the database
    message_id = Column(String(36), primary_key=True)

    # Raw AES-GCM outputs
    ciphertext = Column(LargeBinary, nullable=False)
    nonce = Column(LargeBinary, nullable=False)
    auth_tag = Column(LargeBinary, nullable=False)

    # Public DH domain parameters, hex encoded (2048-bit values overflow any integer column)
    public_value = Column(Text, nullable=False)
    prime = Column(Text, nullable=False)
    generator = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    @classmethod
    def from_record(cls, record: SecretRecord) -> "Message":
        return cls(
            message_id=record.message_id,
            ciphertext=record.ciphertext,
            nonce=record.nonce,
            auth_tag=record.auth_tag,
            public_value=record.public_value,
            prime=record.prime,
            generator=record.generator,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )

    def to_record(self) -> SecretRecord:
        return SecretRecord(
            message_id=self.message_id,
            ciphertext=bytes(self.ciphertext),
            nonce=bytes(self.nonce),
            auth_tag=bytes(self.auth_tag),
            public_value=self.public_value,
            prime=self.prime,
            generator=self.generator,
            created_at=_as_utc(self.created_at),
            expires_at=_as_utc(self.expires_at),
        )


def _as_utc(value):
    # SQLite drops tzinfo on the way back; values are always written in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
