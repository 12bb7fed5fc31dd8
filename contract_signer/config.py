from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "contracts.db"

SIGNHOST_BASE_URL = "https://api.signhost.com/api"
REQUEST_TIMEOUT = 30

CONTRACT_FILE_ID = "contract.pdf"
CONTRACT_DISPLAY_NAME = "Service Agreement"
SIGNATURE_FIELD_WIDTH = 300
SIGNATURE_FIELD_HEIGHT = 140
DAYS_TO_REMIND = 3
DAYS_TO_EXPIRE = 30


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    app_key: str = ""
    shared_secret: str = ""
    base_url: str = SIGNHOST_BASE_URL
    postback_url: str = ""
    output_dir: Path | None = None
    demo_mode: bool = False
    signer_email: str = ""
    signer_name: str = ""
    signer_mobile: str = ""


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def load_settings(env_file: Path | None = None) -> Settings:
    load_dotenv(env_file)
    output_dir = os.getenv("OUTPUT_DIR")
    return Settings(
        api_key=os.getenv("SIGNHOST_API_KEY", ""),
        app_key=os.getenv("SIGNHOST_APP_KEY", ""),
        shared_secret=os.getenv("SIGNHOST_SHARED_SECRET", ""),
        base_url=os.getenv("SIGNHOST_BASE_URL", SIGNHOST_BASE_URL),
        postback_url=os.getenv("POSTBACK_URL", ""),
        output_dir=Path(output_dir) if output_dir else None,
        demo_mode=_flag(os.getenv("DEMO_MODE")),
        signer_email=os.getenv("SIGNER_EMAIL", ""),
        signer_name=os.getenv("SIGNER_NAME", ""),
        signer_mobile=os.getenv("SIGNER_MOBILE", ""),
    )


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "contracts.db"
