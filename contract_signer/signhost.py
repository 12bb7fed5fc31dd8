from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

import requests

from . import config


logger = logging.getLogger(__name__)


class TransactionStatus(IntEnum):
    WAITING_FOR_DOCUMENT = 5
    WAITING_FOR_SIGNER = 10
    IN_PROGRESS = 20
    SIGNED = 30
    REJECTED = 40
    EXPIRED = 50
    CANCELLED = 60
    FAILED = 70


STATUS_LABELS: Dict[int, str] = {
    TransactionStatus.WAITING_FOR_DOCUMENT: "Waiting for Document",
    TransactionStatus.WAITING_FOR_SIGNER: "Waiting for Signer",
    TransactionStatus.IN_PROGRESS: "In Progress",
    TransactionStatus.SIGNED: "Signed",
    TransactionStatus.REJECTED: "Rejected",
    TransactionStatus.EXPIRED: "Expired",
    TransactionStatus.CANCELLED: "Cancelled",
    TransactionStatus.FAILED: "Failed",
}

FINAL_STATUSES = {
    TransactionStatus.SIGNED,
    TransactionStatus.REJECTED,
    TransactionStatus.EXPIRED,
    TransactionStatus.CANCELLED,
    TransactionStatus.FAILED,
}


class SignerActivity(IntEnum):
    INVITATION_SENT = 101
    REMINDER_SENT = 102
    RECEIVED = 103
    OPENED = 201
    VIEWED_ALL = 202
    SIGNED = 203
    REJECTED = 301
    AUTH_FAILED = 401


ACTIVITY_LABELS: Dict[int, str] = {
    SignerActivity.INVITATION_SENT: "Invitation sent",
    SignerActivity.REMINDER_SENT: "Reminder sent",
    SignerActivity.RECEIVED: "Received",
    SignerActivity.OPENED: "Opened",
    SignerActivity.VIEWED_ALL: "Viewed all pages",
    SignerActivity.SIGNED: "Signed",
    SignerActivity.REJECTED: "Rejected",
    SignerActivity.AUTH_FAILED: "Authentication failed",
}


class SignhostError(RuntimeError):
    def __init__(self, message: str, status_code: int, response_body: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


@dataclass(frozen=True)
class SignerInput:
    email: str
    name: str
    mobile: Optional[str] = None
    sign_request_message: Optional[str] = None
    days_to_remind: int = 7
    require_sms_verification: bool = False
    require_email_verification: bool = True
    return_url: Optional[str] = None
    reference: Optional[str] = None


@dataclass(frozen=True)
class SignatureLocation:
    search_text: str
    width: int = 520
    height: int = 240


class SignhostClient:
    """Thin client for the Signhost transaction API."""

    def __init__(
        self,
        api_key: str,
        app_key: str,
        shared_secret: str,
        base_url: str = config.SIGNHOST_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = config.REQUEST_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self.app_key = app_key
        self.shared_secret = shared_secret
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: config.Settings) -> "SignhostClient":
        return cls(
            api_key=settings.api_key,
            app_key=settings.app_key,
            shared_secret=settings.shared_secret,
            base_url=settings.base_url,
        )

    def _headers(self, content_type: Optional[str] = "application/json") -> Dict[str, str]:
        headers = {
            "Authorization": f"APIKey {self.api_key}",
            "Application": f"APPKey {self.app_key}",
        }
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _file_url(self, transaction_id: str, file_id: str) -> str:
        return f"{self.base_url}/transaction/{transaction_id}/file/{quote(file_id, safe='')}"

    def _request(
        self,
        method: str,
        url: str,
        failure: str,
        content_type: Optional[str] = "application/json",
        **kwargs: Any,
    ) -> requests.Response:
        response = self.session.request(
            method,
            url,
            headers=self._headers(content_type),
            timeout=self.timeout,
            **kwargs,
        )
        if not response.ok:
            raise SignhostError(
                f"{failure} ({response.status_code}): {response.text}",
                response.status_code,
                response.text,
            )
        return response

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if "application/json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text

    # -- transactions -----------------------------------------------------

    def create_transaction(
        self,
        signers: Iterable[SignerInput],
        reference: Optional[str] = None,
        postback_url: Optional[str] = None,
        send_email_notifications: bool = True,
        days_to_expire: int = 60,
    ) -> Dict[str, Any]:
        body = {
            "Signers": [
                {
                    "Email": signer.email,
                    "RequireScribble": True,
                    "RequireEmailVerification": signer.require_email_verification,
                    "RequireSmsVerification": signer.require_sms_verification,
                    "Mobile": signer.mobile,
                    "SendSignRequest": True,
                    "SignRequestMessage": signer.sign_request_message
                    or f"Dear {signer.name}, please review and sign this document.",
                    "DaysToRemind": signer.days_to_remind,
                    "ScribbleName": signer.name,
                    "ScribbleNameFixed": True,
                    "ReturnUrl": signer.return_url,
                    "Reference": signer.reference,
                }
                for signer in signers
            ],
            "SendEmailNotifications": send_email_notifications,
            "Reference": reference,
            "PostbackUrl": postback_url,
            "DaysToExpire": days_to_expire,
        }
        response = self._request(
            "POST", f"{self.base_url}/transaction", "Signhost API error", json=body
        )
        transaction = self._decode(response)
        logger.info("Created Signhost transaction %s", transaction.get("Id"))
        return transaction

    def get_transaction(self, transaction_id: str) -> Dict[str, Any]:
        response = self._request(
            "GET",
            f"{self.base_url}/transaction/{transaction_id}",
            "Signhost API error",
            content_type=None,
        )
        return self._decode(response)

    def start_transaction(self, transaction_id: str) -> None:
        self._request(
            "PUT",
            f"{self.base_url}/transaction/{transaction_id}/start",
            "Failed to start transaction",
        )
        logger.info("Started Signhost transaction %s", transaction_id)

    def cancel_transaction(
        self,
        transaction_id: str,
        send_notifications: bool = True,
        reason: Optional[str] = None,
    ) -> None:
        self._request(
            "DELETE",
            f"{self.base_url}/transaction/{transaction_id}",
            "Failed to cancel transaction",
            json={"SendNotifications": send_notifications, "Reason": reason},
        )

    # -- files ------------------------------------------------------------

    def upload_file_metadata(
        self,
        transaction_id: str,
        file_id: str,
        signer_id: str,
        display_name: str,
        signature_location: Optional[SignatureLocation] = None,
    ) -> None:
        body: Dict[str, Any] = {"DisplayName": display_name}
        if signature_location is not None:
            body["Signers"] = {signer_id: {"FormSets": ["SignatureFormSet"]}}
            body["FormSets"] = {
                "SignatureFormSet": {
                    "SignatureField": {
                        "Type": "Signature",
                        "Location": {"Search": signature_location.search_text},
                        "Width": signature_location.width,
                        "Height": signature_location.height,
                    }
                }
            }
        self._request(
            "PUT",
            self._file_url(transaction_id, file_id),
            "Failed to upload file metadata",
            json=body,
        )

    def upload_file(self, transaction_id: str, file_id: str, pdf_bytes: bytes) -> None:
        self._request(
            "PUT",
            self._file_url(transaction_id, file_id),
            "Failed to upload PDF file",
            content_type="application/pdf",
            data=pdf_bytes,
        )

    def download_document(self, transaction_id: str, file_id: str) -> bytes:
        response = self._request(
            "GET",
            self._file_url(transaction_id, file_id),
            "Failed to download document",
            content_type=None,
        )
        return response.content

    def download_receipt(self, transaction_id: str) -> bytes:
        response = self._request(
            "GET",
            f"{self.base_url}/transaction/{transaction_id}/receipt",
            "Failed to download receipt",
            content_type=None,
        )
        return response.content

    # -- postbacks --------------------------------------------------------

    def validate_postback_checksum(self, transaction_id: str, status: int, received_checksum: str) -> bool:
        payload = f"{transaction_id}||{status}|{self.shared_secret}"
        expected = hashlib.sha1(payload.encode("utf-8")).hexdigest()
        return expected.lower() == str(received_checksum).lower()

    def parse_postback(self, body: Any) -> Optional[Dict[str, Any]]:
        """Return the postback when its checksum is valid, otherwise None."""
        if not isinstance(body, dict):
            return None
        status = body.get("Status")
        if not body.get("Id") or not isinstance(status, int) or isinstance(status, bool) or not body.get("Checksum"):
            return None
        if not self.validate_postback_checksum(body["Id"], status, body["Checksum"]):
            return None
        return body


def status_label(status: int) -> str:
    return STATUS_LABELS.get(status, f"Unknown ({status})")


def activity_label(activity: Dict[str, Any]) -> str:
    """Label for a signer activity: known codes first, then the service's own text."""
    code = activity.get("Code")
    if code in ACTIVITY_LABELS:
        return ACTIVITY_LABELS[code]
    return activity.get("Activity") or f"Unknown ({code})"


def is_transaction_complete(status: int) -> bool:
    return status in FINAL_STATUSES


def signer_summaries(transaction: Dict[str, Any]) -> List[str]:
    lines: List[str] = []
    for signer in transaction.get("Signers") or []:
        lines.append(f"Signer: {signer.get('Email', '')}")
        for activity in signer.get("Activities") or []:
            lines.append(f"  - {activity_label(activity)} at {activity.get('CreatedDateTime')}")
        if signer.get("SignedDateTime"):
            lines.append(f"  Signed at: {signer['SignedDateTime']}")
        if signer.get("RejectDateTime"):
            lines.append(f"  Rejected at: {signer['RejectDateTime']} ({signer.get('RejectReason') or ''})")
    return lines
