from __future__ import annotations

from typing import Dict, List, Tuple

from .contract import ContractData, ContractSection, format_currency


# (title, item templates); placeholders are filled by build_sections
SECTION_TEMPLATES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (
        "SCOPE OF SERVICES",
        (
            "The Provider agrees to perform the following services: {project_description}",
            "All services shall be performed in a professional and workmanlike manner consistent with "
            "industry standards.",
            "The Provider shall dedicate sufficient resources and qualified personnel to complete the "
            "services in a timely manner.",
            "Any changes to the scope of services must be agreed upon in writing by both parties.",
        ),
    ),
    (
        "COMPENSATION",
        (
            "The Client agrees to pay the Provider a total amount of {payment_amount} (excluding VAT) "
            "for the services described herein.",
            "Payment terms: {payment_terms}",
            "All invoices shall be paid within thirty (30) days of receipt unless otherwise specified.",
            "Late payments shall accrue interest at a rate of 1.5% per month or the maximum rate "
            "permitted by law, whichever is lower.",
        ),
    ),
    (
        "TERM AND TERMINATION",
        (
            "This Agreement shall commence on the Effective Date and shall continue until all services "
            "have been completed and accepted by the Client.",
            "Either party may terminate this Agreement for convenience upon thirty (30) days prior "
            "written notice to the other party.",
            "Either party may terminate this Agreement immediately upon written notice if the other "
            "party materially breaches any provision of this Agreement and fails to cure such breach "
            "within fifteen (15) days of receiving written notice thereof.",
            "Upon termination, the Client shall pay the Provider for all services satisfactorily "
            "rendered up to the date of termination.",
        ),
    ),
    (
        "CONFIDENTIALITY",
        (
            "Each party agrees to maintain the confidentiality of any proprietary or confidential "
            "information received from the other party during the term of this Agreement.",
            "Confidential information shall not include information that: (a) is or becomes publicly "
            "available through no fault of the receiving party; (b) was rightfully in the receiving "
            "party's possession prior to disclosure; or (c) is independently developed by the "
            "receiving party.",
            "This confidentiality obligation shall survive the termination of this Agreement for a "
            "period of three (3) years.",
        ),
    ),
    (
        "INTELLECTUAL PROPERTY",
        (
            "All intellectual property rights in any work product created by the Provider specifically "
            "for the Client under this Agreement shall be assigned to the Client upon full payment.",
            "The Provider retains all rights to pre-existing materials, tools, and methodologies used "
            "in performing the services.",
            "The Provider grants the Client a non-exclusive, perpetual license to use any pre-existing "
            "materials incorporated into the deliverables.",
        ),
    ),
    (
        "LIMITATION OF LIABILITY",
        (
            "Neither party shall be liable to the other for any indirect, incidental, special, "
            "consequential, or punitive damages arising out of or related to this Agreement.",
            "The Provider's total aggregate liability under this Agreement shall not exceed the total "
            "amount paid by the Client under this Agreement.",
            "The limitations set forth in this section shall not apply to breaches of confidentiality "
            "obligations or gross negligence or willful misconduct.",
        ),
    ),
    (
        "GENERAL PROVISIONS",
        (
            "This Agreement constitutes the entire agreement between the parties with respect to the "
            "subject matter hereof and supersedes all prior negotiations, representations, or "
            "agreements relating thereto.",
            "This Agreement shall be governed by and construed in accordance with the laws of the "
            "Netherlands, without regard to its conflict of laws principles.",
            "Any disputes arising out of or in connection with this Agreement shall be submitted to the "
            "exclusive jurisdiction of the courts of Amsterdam, the Netherlands.",
            "Any amendments or modifications to this Agreement must be made in writing and signed by "
            "both parties.",
            "If any provision of this Agreement is held to be invalid or unenforceable, the remaining "
            "provisions shall continue in full force and effect.",
        ),
    ),
)


def _template_values(data: ContractData) -> Dict[str, str]:
    return {
        "project_description": str(data.project_description),
        "payment_amount": format_currency(data.payment_amount),
        "payment_terms": str(data.payment_terms),
    }


def build_sections(data: ContractData) -> List[ContractSection]:
    values = _template_values(data)
    return [
        ContractSection(title=title, items=tuple(template.format(**values) for template in templates))
        for title, templates in SECTION_TEMPLATES
    ]


def section_label(section_number: int, item_number: int) -> str:
    return f"{section_number}.{item_number}"
