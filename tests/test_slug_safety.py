from __future__ import annotations

from contract_signer.storage import slug_from_contract_number


def test_slug_sanitization() -> None:
    slug = slug_from_contract_number("CONTRACT / 2026: #001!")
    assert slug == "contract-2026-001"


def test_slug_falls_back_to_hash() -> None:
    slug = slug_from_contract_number("///")
    assert len(slug) == 12
