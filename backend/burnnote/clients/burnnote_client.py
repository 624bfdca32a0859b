# burnnote/clients/burnnote_client.py

import logging
import sys

import requests

from burnnote.core.errors import (
    BurnNoteError,
    Expired,
    InvalidKey,
    NotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)

# =========================
# CONFIGURATION
# =========================

SERVER_URL = "http://127.0.0.1:8000"
REQUEST_TIMEOUT = 10  # seconds


def _raise_for_response(resp, on_bad_request=ValidationError):
    """Map an error response back onto the service's error taxonomy."""
    if resp.status_code < 400:
        return

    try:
        detail = resp.json().get("detail")
    except ValueError:
        detail = None
    if not isinstance(detail, str):
        detail = None

    if resp.status_code == 400:
        raise on_bad_request(detail)
    if resp.status_code == 404:
        raise NotFound(detail)
    if resp.status_code == 410:
        raise Expired(detail)

    error = BurnNoteError(detail or f"Server returned {resp.status_code}")
    error.status_code = resp.status_code
    raise error


# =========================
# BURNNOTE CLIENT
# =========================

class BurnNoteClient:
    """
    Thin HTTP client for the three message operations.

    `session` may be anything with requests-style get/post, which lets tests
    pass a FastAPI TestClient straight in.
    """

    def __init__(self, base_url: str = SERVER_URL, session=None, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def create_message(self, message: str) -> dict:
        resp = self.session.post(
            f"{self.base_url}/api/messages",
            json={"message": message},
            timeout=self.timeout,
        )
        _raise_for_response(resp)
        created = resp.json()
        logger.info("Created message %s", created["messageId"])
        return created

    def get_metadata(self, message_id: str) -> dict:
        resp = self.session.get(f"{self.base_url}/api/messages/{message_id}", timeout=self.timeout)
        _raise_for_response(resp)
        return resp.json()

    def decrypt_message(self, message_id: str, decryption_key: str) -> str:
        if not decryption_key:
            raise ValidationError("Decryption key is required")

        resp = self.session.post(
            f"{self.base_url}/api/messages/{message_id}/decrypt",
            json={"decryptionKey": decryption_key},
            timeout=self.timeout,
        )
        # Key presence was checked above, so a 400 here is a rejected key
        _raise_for_response(resp, on_bad_request=InvalidKey)
        return resp.json()["plaintext"]


# =========================
# DEMO USAGE
# =========================

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    client = BurnNoteClient(sys.argv[1] if len(sys.argv) > 1 else SERVER_URL)

    created = client.create_message("This note burns in 24 hours.")
    print(f"Message:  {created['messageId']}")
    print(f"Key:      {created['decryptionKey']}")
    print(f"Expires:  {created['expiresAt']}")

    metadata = client.get_metadata(created["messageId"])
    print(f"Generator: {metadata['generator']}, prime bits: {len(metadata['prime']) * 4}")
    print(f"Plaintext: {client.decrypt_message(created['messageId'], created['decryptionKey'])}")
