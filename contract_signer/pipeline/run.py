from __future__ import annotations

import logging
import os
import time
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .. import config
from ..models import ContractRecord, ContractStatus, find_by_transaction, get_session, init_db
from ..signhost import SignatureLocation, SignerInput, SignhostClient, TransactionStatus
from ..storage import artifact_path, slug_from_contract_number
from .assemble import generate_contract_pdf
from .contract import CLIENT_SIGNATURE_MARKER, ContractData, LayoutOptions
from .qa import ContractValidationError, validate_contract_pdf


logger = logging.getLogger(__name__)

STATUS_BY_TRANSACTION: Dict[int, ContractStatus] = {
    TransactionStatus.WAITING_FOR_DOCUMENT: ContractStatus.SENT,
    TransactionStatus.WAITING_FOR_SIGNER: ContractStatus.SENT,
    TransactionStatus.IN_PROGRESS: ContractStatus.SENT,
    TransactionStatus.SIGNED: ContractStatus.SIGNED,
    TransactionStatus.REJECTED: ContractStatus.REJECTED,
    TransactionStatus.EXPIRED: ContractStatus.EXPIRED,
    TransactionStatus.CANCELLED: ContractStatus.CANCELLED,
    TransactionStatus.FAILED: ContractStatus.FAILED,
}

PARTY_FIELDS = (
    "client_name",
    "client_address",
    "client_city",
    "client_email",
    "provider_name",
    "provider_address",
    "provider_city",
)
DEFAULT_PAYMENT_AMOUNT = 25000
DEFAULT_PAYMENT_TERMS = (
    "50% upon signing, 25% upon completion of development phase, "
    "25% upon final delivery and acceptance"
)


def _long_date(value: date) -> str:
    return f"{value.day} {value:%B %Y}"


def contract_from_env(today: Optional[date] = None) -> ContractData:
    """Sample contract filled from CLIENT_* / PROVIDER_* environment variables."""
    today = today or date.today()
    values = {name: os.getenv(name.upper()) for name in PARTY_FIELDS}
    values.update(
        contract_number=os.getenv("CONTRACT_NUMBER") or f"CONTRACT-{int(time.time() * 1000)}",
        effective_date=_long_date(today),
        project_description=(
            "Development and implementation of a custom web application including design, "
            "development, testing, and deployment phases as detailed in the project specification "
            f"document dated {today:%d/%m/%Y}"
        ),
        payment_amount=float(os.getenv("PAYMENT_AMOUNT") or DEFAULT_PAYMENT_AMOUNT),
        payment_terms=os.getenv("PAYMENT_TERMS") or DEFAULT_PAYMENT_TERMS,
    )
    return ContractData.from_mapping(values)


def _write_error(slug: str, message: str) -> None:
    error_path = artifact_path(slug, "error", base_dir=config.OUT_DIR)
    error_path.write_text(message, encoding="utf-8")


def generate_contract(data: ContractData, options: Optional[LayoutOptions] = None) -> Tuple[Path, bytes]:
    pdf_bytes = generate_contract_pdf(data, options)
    errors = validate_contract_pdf(pdf_bytes, options)
    if errors:
        raise ContractValidationError(errors)
    slug = slug_from_contract_number(data.contract_number)
    pdf_path = artifact_path(slug, "contract", base_dir=config.OUT_DIR)
    pdf_path.write_bytes(pdf_bytes)
    logger.info("Wrote %s (%d bytes)", pdf_path, len(pdf_bytes))
    return pdf_path, pdf_bytes


def send_for_signing(
    client: SignhostClient,
    data: ContractData,
    signer: SignerInput,
    pdf_bytes: bytes,
    postback_url: Optional[str] = None,
) -> Dict[str, Any]:
    transaction = client.create_transaction(
        [signer],
        reference=data.contract_number,
        postback_url=postback_url or None,
        send_email_notifications=True,
        days_to_expire=config.DAYS_TO_EXPIRE,
    )
    transaction_id = transaction["Id"]
    signer_id = transaction["Signers"][0]["Id"]

    client.upload_file_metadata(
        transaction_id,
        config.CONTRACT_FILE_ID,
        signer_id,
        config.CONTRACT_DISPLAY_NAME,
        SignatureLocation(
            search_text=CLIENT_SIGNATURE_MARKER,
            width=config.SIGNATURE_FIELD_WIDTH,
            height=config.SIGNATURE_FIELD_HEIGHT,
        ),
    )
    client.upload_file(transaction_id, config.CONTRACT_FILE_ID, pdf_bytes)
    client.start_transaction(transaction_id)
    return transaction


def default_signer(settings: config.Settings, data: ContractData) -> SignerInput:
    return SignerInput(
        email=settings.signer_email,
        name=settings.signer_name,
        mobile=settings.signer_mobile or None,
        sign_request_message=(
            f"Dear {settings.signer_name},\n\nPlease review and sign the attached Service Agreement."
            f"\n\nBest regards,\n{data.provider_name}"
        ),
        days_to_remind=config.DAYS_TO_REMIND,
    )


def run_contract(
    data: ContractData,
    settings: config.Settings,
    options: Optional[LayoutOptions] = None,
    client: Optional[SignhostClient] = None,
    signer: Optional[SignerInput] = None,
) -> Tuple[ContractRecord, Optional[Dict[str, Any]]]:
    init_db()
    slug = slug_from_contract_number(data.contract_number)
    record = ContractRecord(contract_number=data.contract_number, slug=slug)
    transaction: Optional[Dict[str, Any]] = None
    try:
        pdf_path, pdf_bytes = generate_contract(data, options)
        record.pdf_path = str(pdf_path.relative_to(config.OUT_DIR))
        record.status = ContractStatus.GENERATED
        if not settings.demo_mode:
            client = client or SignhostClient.from_settings(settings)
            signer = signer or default_signer(settings, data)
            transaction = send_for_signing(client, data, signer, pdf_bytes, settings.postback_url)
            record.transaction_id = transaction["Id"]
            record.signer_email = signer.email
            record.status = ContractStatus.SENT
    except Exception as exc:
        logger.exception("Contract pipeline error for %s", data.contract_number)
        record.status = ContractStatus.FAILED
        record.fail_detail = str(exc)
        _write_error(slug, str(exc))

    with get_session() as session:
        session.add(record)
        session.commit()
        session.refresh(record)
    return record, transaction


def _update_status(record: ContractRecord, status: int) -> None:
    record.status = STATUS_BY_TRANSACTION.get(status, record.status)
    record.updated_at = datetime.utcnow()


def refresh_status(client: SignhostClient, transaction_id: str) -> Tuple[Optional[ContractRecord], Dict[str, Any]]:
    """Pull the transaction; when signed, store the signed document and receipt."""
    init_db()
    transaction = client.get_transaction(transaction_id)
    with get_session() as session:
        record = find_by_transaction(session, transaction_id)
        if record is None:
            logger.warning("No stored contract for transaction %s", transaction_id)
            return None, transaction
        _update_status(record, transaction.get("Status"))
        if transaction.get("Status") == TransactionStatus.SIGNED:
            signed_path = artifact_path(record.slug, "signed", base_dir=config.OUT_DIR)
            signed_path.write_bytes(client.download_document(transaction_id, config.CONTRACT_FILE_ID))
            receipt_path = artifact_path(record.slug, "receipt", base_dir=config.OUT_DIR)
            receipt_path.write_bytes(client.download_receipt(transaction_id))
        session.add(record)
        session.commit()
        session.refresh(record)
    return record, transaction


def cancel_contract(
    client: SignhostClient,
    transaction_id: str,
    reason: Optional[str] = None,
    send_notifications: bool = True,
) -> Optional[ContractRecord]:
    """Cancel a running transaction and mark its stored contract as cancelled."""
    client.cancel_transaction(transaction_id, send_notifications=send_notifications, reason=reason)
    init_db()
    with get_session() as session:
        record = find_by_transaction(session, transaction_id)
        if record is None:
            logger.warning("No stored contract for transaction %s", transaction_id)
            return None
        _update_status(record, TransactionStatus.CANCELLED)
        session.add(record)
        session.commit()
        session.refresh(record)
    logger.info("Transaction %s cancelled", transaction_id)
    return record


def apply_postback(client: SignhostClient, payload: Any) -> Optional[ContractRecord]:
    postback = client.parse_postback(payload)
    if postback is None:
        logger.warning("Invalid postback received")
        return None
    init_db()
    with get_session() as session:
        record = find_by_transaction(session, postback["Id"])
        if record is None:
            logger.warning("Postback for unknown transaction %s", postback["Id"])
            return None
        _update_status(record, postback["Status"])
        session.add(record)
        session.commit()
        session.refresh(record)
    logger.info("Transaction %s is now %s", postback["Id"], record.status.value)
    return record
