from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from . import config
from .models import ContractStatus, reset_engine
from .pipeline.contract import ContractData, LayoutOptions, PageSize, format_currency
from .pipeline.run import (
    apply_postback,
    cancel_contract,
    contract_from_env,
    generate_contract,
    refresh_status,
    run_contract,
)
from .signhost import SignhostClient, signer_summaries, status_label

app = typer.Typer(help="Contract PDF generation and e-signature pipeline")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress")) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def _prepare(env_file: Optional[Path], out: Optional[Path]) -> config.Settings:
    settings = config.load_settings(env_file)
    out_dir = out or settings.output_dir
    if out_dir:
        config.set_out_dir(out_dir)
        reset_engine()
    return settings


def _options(page_size: PageSize, no_markers: bool, margin: float) -> LayoutOptions:
    return LayoutOptions(include_signature_markers=not no_markers, margin=margin, page_size=page_size)


def _summary(data: ContractData) -> None:
    typer.echo("Contract Summary:")
    typer.echo(f"  Contract Number: {data.contract_number}")
    typer.echo(f"  Client: {data.client_name}")
    typer.echo(f"  Provider: {data.provider_name}")
    typer.echo(f"  Amount: {format_currency(data.payment_amount)}")
    typer.echo(f"  Effective Date: {data.effective_date}")


@app.command()
def build(
    env_file: Optional[Path] = typer.Option(None, "--env-file", help=".env file with contract fields"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    page_size: PageSize = typer.Option(PageSize.A4, "--page-size", help="Page size"),
    margin: float = typer.Option(72.0, "--margin", help="Page margin in points"),
    no_markers: bool = typer.Option(False, "--no-markers", help="Omit signature anchor text"),
) -> None:
    """Generate the contract PDF without contacting the signing service."""
    _prepare(env_file, out)
    data = contract_from_env()
    pdf_path, pdf_bytes = generate_contract(data, _options(page_size, no_markers, margin))
    typer.echo(f"PDF generated ({len(pdf_bytes) / 1024:.1f} KB): {pdf_path}")
    _summary(data)


@app.command()
def send(
    env_file: Optional[Path] = typer.Option(None, "--env-file", help=".env file with credentials"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    page_size: PageSize = typer.Option(PageSize.A4, "--page-size", help="Page size"),
) -> None:
    """Generate the contract and start a signing transaction (skipped in DEMO_MODE)."""
    settings = _prepare(env_file, out)
    if not settings.demo_mode and not settings.api_key:
        typer.echo("Signhost credentials missing; set SIGNHOST_API_KEY or DEMO_MODE=true", err=True)
        raise typer.Exit(code=1)

    data = contract_from_env()
    record, transaction = run_contract(data, settings, _options(page_size, False, 72.0))
    if record.status == ContractStatus.FAILED:
        typer.echo(f"FAILED: {record.fail_detail}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"PDF saved to: {config.OUT_DIR / record.pdf_path}")
    if transaction is None:
        typer.echo("Demo mode enabled - skipping Signhost integration.")
        _summary(data)
        return

    signer = transaction["Signers"][0]
    typer.echo(f"Transaction ID: {transaction['Id']}")
    typer.echo(f"Contract Number: {data.contract_number}")
    typer.echo(f"Signer: {settings.signer_name} <{settings.signer_email}>")
    typer.echo(f"Status: {status_label(transaction.get('Status'))}")
    typer.echo(f"Signing URL: {signer.get('SignUrl', '')}")
    if not settings.postback_url:
        typer.echo("Tip: configure POSTBACK_URL to receive status updates via webhook.")


@app.command()
def status(
    transaction_id: str = typer.Argument(..., help="Signhost transaction id"),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help=".env file with credentials"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
) -> None:
    """Show transaction status; downloads the signed document once signed."""
    settings = _prepare(env_file, out)
    record, transaction = refresh_status(SignhostClient.from_settings(settings), transaction_id)
    typer.echo(f"Status: {status_label(transaction.get('Status'))} ({transaction.get('Status')})")
    for line in signer_summaries(transaction):
        typer.echo(line)
    if record is not None and record.status == ContractStatus.SIGNED:
        typer.echo(f"Signed document saved under: {config.OUT_DIR / record.slug}")


@app.command()
def cancel(
    transaction_id: str = typer.Argument(..., help="Signhost transaction id"),
    reason: Optional[str] = typer.Option(None, "--reason", help="Reason shown to the signer"),
    quiet: bool = typer.Option(False, "--quiet", help="Do not notify the signer"),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help=".env file with credentials"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
) -> None:
    """Cancel a signing transaction that has not completed yet."""
    settings = _prepare(env_file, out)
    record = cancel_contract(
        SignhostClient.from_settings(settings), transaction_id, reason=reason, send_notifications=not quiet
    )
    typer.echo(f"Transaction {transaction_id} cancelled")
    if record is not None:
        typer.echo(f"{record.contract_number}: {record.status.value}")


@app.command()
def postback(
    payload: Path = typer.Argument(..., exists=True, help="JSON postback body"),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help=".env file with credentials"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
) -> None:
    """Validate a postback body and apply it to the stored contract."""
    settings = _prepare(env_file, out)
    body = json.loads(payload.read_text(encoding="utf-8"))
    record = apply_postback(SignhostClient.from_settings(settings), body)
    if record is None:
        typer.echo("Postback rejected", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{record.contract_number}: {record.status.value}")


if __name__ == "__main__":
    app()
