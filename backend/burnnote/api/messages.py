# burnnote/api/messages.py

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from slowapi import Limiter

from burnnote.core.circuit_breaker import CREATE_LIMIT, DECRYPT_LIMIT
from burnnote.core.errors import BurnNoteError
from burnnote.core.message import MessageService

logger = logging.getLogger(__name__)


class CamelSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateMessageSchema(CamelSchema):
    message: Optional[str] = None


class CreatedMessageSchema(CamelSchema):
    message_id: str
    decryption_key: str
    access_url: str
    expires_at: datetime


class MessageMetadataSchema(CamelSchema):
    message_id: str
    public_value: str
    prime: str
    generator: str
    requires_key: bool = True


class DecryptMessageSchema(CamelSchema):
    decryption_key: Optional[str] = None


class DecryptedMessageSchema(CamelSchema):
    plaintext: str


def get_message_service(request: Request) -> MessageService:
    return request.app.state.message_service


def _to_http(e: BurnNoteError) -> HTTPException:
    if e.status_code >= 500:
        logger.error("Message operation failed: %s", e.detail)
        return HTTPException(status_code=500, detail="Internal server error")
    return HTTPException(status_code=e.status_code, detail=e.detail)


def _unexpected(operation: str, message_id: Optional[str] = None) -> HTTPException:
    logger.exception("Unexpected error in %s (message %s)", operation, message_id)
    return HTTPException(status_code=500, detail="Internal server error")


def build_router(limiter: Limiter) -> APIRouter:
    """Message routes, rate limited by the limiter of the app that mounts them."""
    router = APIRouter(prefix="/api/messages")

    @router.post("", status_code=201, response_model=CreatedMessageSchema)
    @limiter.limit(CREATE_LIMIT)
    def create_message(
        request: Request,
        payload: CreateMessageSchema,
        service: MessageService = Depends(get_message_service),
    ):
        try:
            created = service.create(payload.message)
        except BurnNoteError as e:
            raise _to_http(e)
        except Exception:
            raise _unexpected("create_message")

        return CreatedMessageSchema(
            message_id=created.message_id,
            decryption_key=created.decryption_key,
            access_url=created.access_url,
            expires_at=created.expires_at,
        )

    @router.get("/{message_id}", response_model=MessageMetadataSchema)
    def get_message(message_id: str, service: MessageService = Depends(get_message_service)):
        """Public domain parameters only. The ciphertext never leaves through here."""
        try:
            metadata = service.fetch_metadata(message_id)
        except BurnNoteError as e:
            raise _to_http(e)
        except Exception:
            raise _unexpected("get_message", message_id)

        return MessageMetadataSchema(
            message_id=metadata.message_id,
            public_value=metadata.public_value,
            prime=metadata.prime,
            generator=metadata.generator,
            requires_key=metadata.requires_key,
        )

    @router.post("/{message_id}/decrypt", response_model=DecryptedMessageSchema)
    @limiter.limit(DECRYPT_LIMIT)
    def decrypt_message(
        request: Request,
        message_id: str,
        payload: DecryptMessageSchema,
        service: MessageService = Depends(get_message_service),
    ):
        try:
            plaintext = service.decrypt(message_id, payload.decryption_key)
        except BurnNoteError as e:
            raise _to_http(e)
        except Exception:
            raise _unexpected("decrypt_message", message_id)

        return DecryptedMessageSchema(plaintext=plaintext)

    return router
