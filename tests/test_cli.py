from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from contract_signer.main import app


runner = CliRunner()


def test_build_command_writes_contract(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("CONTRACT_NUMBER", "CLI-1")
    monkeypatch.setenv("CLIENT_NAME", "Acme")
    result = runner.invoke(
        app,
        ["build", "--out", str(tmp_path), "--env-file", str(tmp_path / "missing.env"), "--page-size", "LETTER"],
    )
    assert result.exit_code == 0, result.output
    assert (tmp_path / "cli-1" / "contract.pdf").exists()
    assert "Amount: €25.000,00" in result.output


def test_send_without_credentials_exits(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("DEMO_MODE", "false")
    monkeypatch.setenv("SIGNHOST_API_KEY", "")
    result = runner.invoke(app, ["send", "--out", str(tmp_path), "--env-file", str(tmp_path / "missing.env")])
    assert result.exit_code == 1


def test_cancel_command_passes_reason_and_quiet(tmp_path: Path, monkeypatch) -> None:
    calls = []

    def fake_cancel(client, transaction_id, reason=None, send_notifications=True):
        calls.append((transaction_id, reason, send_notifications))
        return None

    monkeypatch.setattr("contract_signer.main.cancel_contract", fake_cancel)
    result = runner.invoke(
        app,
        ["cancel", "tx-9", "--reason", "Superseded", "--quiet", "--out", str(tmp_path),
         "--env-file", str(tmp_path / "missing.env")],
    )
    assert result.exit_code == 0, result.output
    assert calls == [("tx-9", "Superseded", False)]
    assert "Transaction tx-9 cancelled" in result.output
