from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, Session, SQLModel, create_engine, select

from . import config


class ContractStatus(str, Enum):
    GENERATED = "GENERATED"
    SENT = "SENT"
    SIGNED = "SIGNED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


class ContractRecord(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    contract_number: str = Field(index=True)
    slug: str
    status: ContractStatus = Field(default=ContractStatus.GENERATED)
    transaction_id: Optional[str] = Field(default=None, index=True)
    signer_email: Optional[str] = None
    pdf_path: Optional[str] = None
    fail_detail: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)


def find_by_transaction(session: Session, transaction_id: str) -> ContractRecord | None:
    statement = select(ContractRecord).where(ContractRecord.transaction_id == transaction_id)
    return session.exec(statement).first()
