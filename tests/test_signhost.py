from __future__ import annotations

import hashlib

import pytest

from contract_signer.signhost import (
    SignatureLocation,
    SignerInput,
    SignhostClient,
    SignhostError,
    SignerActivity,
    TransactionStatus,
    activity_label,
    is_transaction_complete,
    signer_summaries,
    status_label,
)


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text="", content=b"", content_type="application/json"):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload
        self.text = text
        self.content = content
        self.headers = {"content-type": content_type}

    def json(self):
        return self._payload


class DummySession:
    def __init__(self, responses=None) -> None:
        self.calls = []
        self.responses = list(responses or [])

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.responses:
            return self.responses.pop(0)
        return DummyResponse(content_type="text/plain")


def _client(session: DummySession, secret: str = "secret") -> SignhostClient:
    return SignhostClient("api", "app", secret, base_url="https://signhost.test/api/", session=session)


def test_create_transaction_body_and_headers() -> None:
    session = DummySession([DummyResponse(payload={"Id": "tx-1", "Signers": [{"Id": "s-1"}]})])
    transaction = _client(session).create_transaction(
        [SignerInput(email="jane@example.com", name="Jane")],
        reference="CONTRACT-1",
        days_to_expire=30,
    )
    assert transaction["Id"] == "tx-1"
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "https://signhost.test/api/transaction")
    assert kwargs["headers"]["Authorization"] == "APIKey api"
    assert kwargs["headers"]["Application"] == "APPKey app"
    signer = kwargs["json"]["Signers"][0]
    assert signer["SignRequestMessage"] == "Dear Jane, please review and sign this document."
    assert signer["RequireEmailVerification"] is True
    assert signer["DaysToRemind"] == 7
    assert kwargs["json"]["DaysToExpire"] == 30


def test_file_metadata_places_signature_on_search_text() -> None:
    session = DummySession()
    _client(session).upload_file_metadata(
        "tx-1",
        "contract.pdf",
        "s-1",
        "Service Agreement",
        SignatureLocation(search_text="{{ClientSignature}}", width=300, height=140),
    )
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("PUT", "https://signhost.test/api/transaction/tx-1/file/contract.pdf")
    field = kwargs["json"]["FormSets"]["SignatureFormSet"]["SignatureField"]
    assert field == {
        "Type": "Signature",
        "Location": {"Search": "{{ClientSignature}}"},
        "Width": 300,
        "Height": 140,
    }
    assert kwargs["json"]["Signers"] == {"s-1": {"FormSets": ["SignatureFormSet"]}}


def test_upload_file_sends_pdf_bytes() -> None:
    session = DummySession()
    _client(session).upload_file("tx-1", "my contract.pdf", b"%PDF")
    method, url, kwargs = session.calls[0]
    assert url.endswith("/file/my%20contract.pdf")
    assert kwargs["headers"]["Content-Type"] == "application/pdf"
    assert kwargs["data"] == b"%PDF"


def test_error_response_raises_signhost_error() -> None:
    session = DummySession([DummyResponse(status_code=401, text="Unauthorized", content_type="text/plain")])
    with pytest.raises(SignhostError) as excinfo:
        _client(session).start_transaction("tx-1")
    assert excinfo.value.status_code == 401
    assert excinfo.value.response_body == "Unauthorized"


def test_download_document_returns_bytes() -> None:
    session = DummySession([DummyResponse(content=b"signed", content_type="application/pdf")])
    assert _client(session).download_document("tx-1", "contract.pdf") == b"signed"
    assert "Content-Type" not in session.calls[0][2]["headers"]


def test_postback_checksum() -> None:
    checksum = hashlib.sha1(b"tx-1||30|secret").hexdigest()
    client = _client(DummySession())
    assert client.validate_postback_checksum("tx-1", 30, checksum.upper())
    assert not client.validate_postback_checksum("tx-1", 40, checksum)


def test_parse_postback_rejects_invalid_payloads() -> None:
    client = _client(DummySession())
    checksum = hashlib.sha1(b"tx-1||30|secret").hexdigest()
    valid = {"Id": "tx-1", "Status": 30, "Checksum": checksum}
    assert client.parse_postback(valid) == valid
    assert client.parse_postback(None) is None
    assert client.parse_postback({"Id": "tx-1", "Status": "30", "Checksum": checksum}) is None
    assert client.parse_postback({"Id": "tx-1", "Status": 30, "Checksum": "bad"}) is None


def test_status_helpers() -> None:
    assert status_label(TransactionStatus.SIGNED) == "Signed"
    assert status_label(99) == "Unknown (99)"
    assert is_transaction_complete(30)
    assert not is_transaction_complete(TransactionStatus.WAITING_FOR_SIGNER)


def test_signer_summaries() -> None:
    transaction = {
        "Signers": [
            {
                "Email": "jane@example.com",
                "Activities": [{"Activity": "Opened", "CreatedDateTime": "2026-10-18T10:00"}],
                "SignedDateTime": "2026-10-18T10:05",
            }
        ]
    }
    assert signer_summaries(transaction) == [
        "Signer: jane@example.com",
        "  - Opened at 2026-10-18T10:00",
        "  Signed at: 2026-10-18T10:05",
    ]


def test_cancel_transaction_sends_delete_with_reason() -> None:
    session = DummySession()
    _client(session).cancel_transaction("tx-1", send_notifications=False, reason="Superseded")
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("DELETE", "https://signhost.test/api/transaction/tx-1")
    assert kwargs["json"] == {"SendNotifications": False, "Reason": "Superseded"}


def test_cancel_transaction_failure_raises() -> None:
    session = DummySession([DummyResponse(status_code=409, text="already signed")])
    with pytest.raises(SignhostError) as excinfo:
        _client(session).cancel_transaction("tx-1")
    assert excinfo.value.status_code == 409


def test_activity_label_prefers_known_codes() -> None:
    assert activity_label({"Code": SignerActivity.VIEWED_ALL, "Activity": "viewed"}) == "Viewed all pages"
    assert activity_label({"Code": 203}) == "Signed"
    assert activity_label({"Code": 999, "Activity": "Forwarded"}) == "Forwarded"
    assert activity_label({"Code": 999}) == "Unknown (999)"
