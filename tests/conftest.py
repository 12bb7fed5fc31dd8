from __future__ import annotations

import pytest

from contract_signer.pipeline.contract import ContractData


@pytest.fixture
def contract() -> ContractData:
    return ContractData(
        client_name="Acme Retail B.V.",
        client_address="Keizersgracht 100",
        client_city="1015 AA Amsterdam",
        client_email="legal@acme.example",
        provider_name="Northwind Studio",
        provider_address="Stationsplein 1",
        provider_city="3511 ED Utrecht",
        contract_number="CONTRACT-2026-001",
        effective_date="18 October 2026",
        project_description="Design and build of a customer portal.",
        payment_amount=25000,
        payment_terms="50% upon signing, 50% upon delivery",
    )


@pytest.fixture
def minimal_contract() -> ContractData:
    return ContractData(
        client_name="X",
        client_address="X",
        client_city="X",
        client_email="X",
        provider_name="X",
        provider_address="X",
        provider_city="X",
        contract_number="X",
        effective_date="X",
        project_description="X",
        payment_amount=1,
        payment_terms="X",
    )
