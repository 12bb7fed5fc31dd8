from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Mapping, Tuple

from reportlab.lib.pagesizes import A4, LETTER


CLIENT_SIGNATURE_MARKER = "{{ClientSignature}}"
PROVIDER_SIGNATURE_MARKER = "{{ProviderSignature}}"


class PageSize(str, Enum):
    A4 = "A4"
    LETTER = "LETTER"

    @property
    def dimensions(self) -> Tuple[float, float]:
        return A4 if self is PageSize.A4 else LETTER


@dataclass(frozen=True)
class ContractData:
    client_name: str = ""
    client_address: str = ""
    client_city: str = ""
    client_email: str = ""
    provider_name: str = ""
    provider_address: str = ""
    provider_city: str = ""
    contract_number: str = ""
    effective_date: str = ""
    project_description: str = ""
    payment_amount: float = 0
    payment_terms: str = ""

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ContractData":
        """Build contract data from a loose mapping; unknown keys are ignored."""
        values = {}
        for item in fields(cls):
            if item.name not in mapping or mapping[item.name] is None:
                continue
            raw = mapping[item.name]
            values[item.name] = raw if item.name == "payment_amount" else str(raw)
        return cls(**values)


@dataclass(frozen=True)
class ContractSection:
    title: str
    items: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LayoutOptions:
    include_signature_markers: bool = True
    margin: float = 72.0
    page_size: PageSize = PageSize.A4


def format_currency(amount: float) -> str:
    # €1.234.567,89
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return f"€{amount}"
    grouped = f"{amount:,.2f}"
    return "€" + grouped.replace(",", "_").replace(".", ",").replace("_", ".")
