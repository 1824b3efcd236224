from __future__ import annotations

import asyncio
import json

import pytest

from tokemak_health.exceptions import LedgerReadError
from tokemak_health.pipeline import run as pipeline_run
from tokemak_health.settings import DryRunFormat

from conftest import DAI, E18, STRATEGY, TDAI


@pytest.mark.asyncio
async def test_run_audit_publishes_json_in_dry_run(state, fake_ledger, capsys):
    state.settings.dry_run_format = DryRunFormat.JSON
    fake_ledger.supplies[TDAI.lower()] = 1_000 * E18
    fake_ledger.set_balance(DAI, TDAI, 1_000 * E18)
    fake_ledger.set_balance(TDAI, STRATEGY, 1_000 * E18)

    report = await pipeline_run.run_audit(state, ledger=fake_ledger)

    output = json.loads(capsys.readouterr().out)
    assert output["block_number"] == 18_500_000
    assert output["assets"][0]["asset_name"] == "DAI"
    assert output["assets"][0]["health_ratio"] == "1.000"
    assert output["assets"][0]["total_underlying_assets"] == "1000.000000"
    assert report.assets[0].free_assets == 1000


@pytest.mark.asyncio
async def test_run_audit_does_not_publish_on_failure(state, fake_ledger, monkeypatch):
    fake_ledger.fail("tAsset", STRATEGY)
    published: list[object] = []

    async def fake_publish(_config, report):
        published.append(report)
        return True

    monkeypatch.setattr(pipeline_run, "publish_report", fake_publish)

    with pytest.raises(LedgerReadError):
        await pipeline_run.run_audit(state, ledger=fake_ledger)

    assert published == []


@pytest.mark.asyncio
async def test_undelivered_report_is_still_returned(state, fake_ledger, monkeypatch):
    fake_ledger.supplies[TDAI.lower()] = E18

    async def failed_delivery(_config, _report):
        return False

    monkeypatch.setattr(pipeline_run, "publish_report", failed_delivery)

    report = await pipeline_run.run_audit(state, ledger=fake_ledger)

    assert report.assets[0].asset_name == "DAI"


@pytest.mark.asyncio
async def test_run_audit_raises_timeout(state, monkeypatch):
    async def slow_context(_state, _ledger=None):
        await asyncio.sleep(0.2)

    monkeypatch.setattr(pipeline_run, "build_context", slow_context)
    state.settings.global_timeout_seconds = 0.05

    with pytest.raises(asyncio.TimeoutError, match="global timeout"):
        await pipeline_run.run_audit(state)


@pytest.mark.asyncio
async def test_run_forever_continues_after_a_failed_cycle(state, monkeypatch):
    state.settings.audit_interval_seconds = 0.01
    outcomes = [LedgerReadError("rpc down"), None, None]
    attempts: list[int] = []
    alerts: list[str] = []

    async def fake_run_audit(_state):
        attempts.append(len(attempts))
        outcome = outcomes[len(attempts) - 1]
        if outcome is not None:
            raise outcome

    async def fake_notify(_config, text):
        alerts.append(text)
        return True

    monkeypatch.setattr(pipeline_run, "run_audit", fake_run_audit)
    monkeypatch.setattr(pipeline_run, "notify_operator", fake_notify)

    await pipeline_run.run_forever(state, max_cycles=3)

    assert len(attempts) == 3
    assert alerts == ["Tokemak health check failed: LedgerReadError: rpc down"]
