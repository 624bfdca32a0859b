# burnnote/core/store.py

from typing import Optional, Protocol, runtime_checkable

from burnnote.models.secret_record import SecretRecord


@runtime_checkable
class MessageStore(Protocol):
    """
    Key-value store for secret records, keyed by message id.
    Implementations raise StoreError for any backend failure.
    """

    def put(self, record: SecretRecord) -> None:
        ...

    def get(self, message_id: str) -> Optional[SecretRecord]:
        ...

    def delete(self, message_id: str) -> bool:
        ...
