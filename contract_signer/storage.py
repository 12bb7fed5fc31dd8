from __future__ import annotations

import hashlib
import re
from pathlib import Path

from slugify import slugify

from . import config


ARTIFACT_NAMES = {
    "contract": "contract.pdf",
    "signed": "contract-signed.pdf",
    "receipt": "receipt.pdf",
    "error": "error.log",
}


def slug_from_contract_number(contract_number: str) -> str:
    slug = slugify(contract_number)
    slug = re.sub(r"[^a-z0-9-]+", "-", slug.lower()).strip("-")
    if not slug:
        slug = hashlib.md5(contract_number.encode("utf-8")).hexdigest()[:12]
    if ".." in slug or "/" in slug or "\\" in slug:
        raise ValueError("Invalid slug generated from contract number")
    return slug


def contract_dir(slug: str, base_dir: Path | None = None) -> Path:
    root = base_dir or config.OUT_DIR
    path = root / slug
    path.mkdir(parents=True, exist_ok=True)
    return path


def artifact_path(slug: str, artifact_type: str, base_dir: Path | None = None) -> Path:
    filename = ARTIFACT_NAMES[artifact_type]
    return contract_dir(slug, base_dir=base_dir) / filename
