"""
Service-level tests for create / fetch_metadata / decrypt.

Tests:
- End-to-end scenarios: create+decrypt, wrong key, expiry, empty input
- Metadata never exposes secret material
- Private scalar never reaches the store
- Optional delete-after-read
- Infrastructure failures leave nothing behind
"""

from dataclasses import fields
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from burnnote.config import Settings
from burnnote.core.errors import (
    EntropyUnavailable, Expired, InvalidKey, NotFound, StoreError, ValidationError,
)
from burnnote.core.message import MessageService, parse_decryption_key
from burnnote.models.message import Message


class TestCreate:

    def test_create_returns_key_once(self, service, store, clock):
        created = service.create("hello")

        assert created.message_id
        assert len(created.decryption_key) == 512
        assert created.expires_at == clock.now + timedelta(hours=24)
        assert created.access_url == f"/api/messages/{created.message_id}"

        record = store.get(created.message_id)
        assert record is not None
        assert record.created_at == clock.now
        assert record.expires_at == created.expires_at

    def test_private_scalar_not_persisted(self, service, store):
        created = service.create("hello")
        record = store.get(created.message_id)
        key_basis = bytes.fromhex(created.decryption_key)

        for f in fields(record):
            value = getattr(record, f.name)
            if isinstance(value, bytes):
                assert key_basis not in value
            elif isinstance(value, str):
                assert created.decryption_key not in value
                assert created.decryption_key.lstrip("0") not in value

    def test_distinct_ids_and_keys(self, service):
        a = service.create("same")
        b = service.create("same")
        assert a.message_id != b.message_id
        assert a.decryption_key != b.decryption_key

    @pytest.mark.parametrize("plaintext", ["", None])
    def test_empty_message_rejected(self, service, plaintext):
        """Scenario D: empty input is a validation error."""
        with pytest.raises(ValidationError):
            service.create(plaintext)

    def test_unencodable_message_rejected(self, service, store):
        """A lone surrogate cannot be UTF-8 encoded; nothing is stored."""
        with pytest.raises(ValidationError):
            service.create("\ud800")
        with store.db_session() as db:
            assert db.query(Message).count() == 0

    def test_store_failure_propagates(self, settings):
        store = MagicMock()
        store.put.side_effect = StoreError()
        with pytest.raises(StoreError):
            MessageService(store, settings).create("hello")

    def test_entropy_failure_persists_nothing(self, service, store):
        with patch("burnnote.core.crypto.os.urandom", side_effect=OSError("no entropy")):
            with pytest.raises(EntropyUnavailable):
                service.create("hello")
        with store.db_session() as db:
            assert db.query(Message).count() == 0


class TestFetchMetadata:

    def test_metadata_fields(self, service):
        created = service.create("hello")
        meta = service.fetch_metadata(created.message_id)

        assert meta.message_id == created.message_id
        assert meta.requires_key is True
        assert meta.generator == "2"
        assert int(meta.prime, 16).bit_length() == 2048
        assert 1 < int(meta.public_value, 16) < int(meta.prime, 16)

    def test_metadata_never_leaks_secrets(self, service, store):
        created = service.create("hello")
        record = store.get(created.message_id)
        meta = service.fetch_metadata(created.message_id)

        names = {f.name for f in fields(meta)}
        assert not names & {"ciphertext", "nonce", "auth_tag", "decryption_key", "key_basis"}
        for value in vars(meta).values():
            assert value not in (record.ciphertext, record.nonce, record.auth_tag)
            assert value != created.decryption_key

    def test_not_found(self, service):
        with pytest.raises(NotFound):
            service.fetch_metadata("missing")


class TestDecrypt:

    def test_round_trip(self, service):
        """Scenario A."""
        created = service.create("hello")
        assert service.decrypt(created.message_id, created.decryption_key) == "hello"

    @pytest.mark.parametrize("plaintext", ["x", "multi\nline\ttext", "ünïcødé ☃ 🔥", "a" * 10000])
    def test_round_trip_various(self, service, plaintext):
        created = service.create(plaintext)
        assert service.decrypt(created.message_id, created.decryption_key) == plaintext

    def test_repeatable(self, service):
        created = service.create("hello")
        for _ in range(3):
            assert service.decrypt(created.message_id, created.decryption_key) == "hello"

    def test_key_whitespace_and_case_tolerated(self, service):
        created = service.create("hello")
        key = f"  {created.decryption_key.upper()}\n"
        assert service.decrypt(created.message_id, key) == "hello"

    def test_wrong_key(self, service):
        """Scenario B: a garbage key is an InvalidKey, not a crash."""
        created = service.create("hello")
        with pytest.raises(InvalidKey):
            service.decrypt(created.message_id, "wrong-key")

    def test_other_messages_key(self, service):
        first = service.create("first")
        second = service.create("second")
        with pytest.raises(InvalidKey):
            service.decrypt(first.message_id, second.decryption_key)

    def test_short_hex_key(self, service):
        created = service.create("hello")
        with pytest.raises(InvalidKey):
            service.decrypt(created.message_id, created.decryption_key[:16])

    @pytest.mark.parametrize("key", ["", "   ", None])
    def test_missing_key(self, service, key):
        created = service.create("hello")
        with pytest.raises(ValidationError):
            service.decrypt(created.message_id, key)

    def test_not_found(self, service):
        with pytest.raises(NotFound):
            service.decrypt("missing", "ab" * 256)


class TestExpiry:

    def test_expired_message(self, service, clock):
        """Scenario C: once past expiry both reads report Expired."""
        created = service.create("hello")
        clock.advance(timedelta(hours=24, seconds=1))

        with pytest.raises(Expired):
            service.fetch_metadata(created.message_id)
        with pytest.raises(Expired):
            service.decrypt(created.message_id, created.decryption_key)

    def test_boundary(self, service, clock):
        created = service.create("hello")

        clock.now = created.expires_at - timedelta(seconds=1)
        assert service.fetch_metadata(created.message_id).message_id == created.message_id

        clock.now = created.expires_at + timedelta(seconds=1)
        with pytest.raises(Expired):
            service.fetch_metadata(created.message_id)

    def test_expiry_checked_before_key(self, service, clock):
        created = service.create("hello")
        clock.advance(timedelta(days=2))
        with pytest.raises(Expired):
            service.decrypt(created.message_id, "wrong-key")

    def test_rechecked_every_read(self, service, clock):
        created = service.create("hello")
        assert service.decrypt(created.message_id, created.decryption_key) == "hello"
        clock.advance(timedelta(hours=24))
        with pytest.raises(Expired):
            service.decrypt(created.message_id, created.decryption_key)


class TestDeleteAfterRead:

    @pytest.fixture
    def burning_service(self, store, clock):
        settings = Settings(delete_after_read=True, rate_limit_enabled=False)
        return MessageService(store, settings, clock=clock)

    def test_disabled_by_default(self, service, store):
        created = service.create("hello")
        service.decrypt(created.message_id, created.decryption_key)
        assert store.get(created.message_id) is not None

    def test_deleted_after_successful_read(self, burning_service, store):
        created = burning_service.create("hello")
        assert burning_service.decrypt(created.message_id, created.decryption_key) == "hello"
        assert store.get(created.message_id) is None
        with pytest.raises(NotFound):
            burning_service.decrypt(created.message_id, created.decryption_key)

    def test_failed_read_keeps_message(self, burning_service, store):
        created = burning_service.create("hello")
        with pytest.raises(InvalidKey):
            burning_service.decrypt(created.message_id, "00" * 256)
        assert store.get(created.message_id) is not None


def test_parse_decryption_key():
    assert parse_decryption_key("00ff") == b"\x00\xff"
    with pytest.raises(InvalidKey):
        parse_decryption_key("not hex")
