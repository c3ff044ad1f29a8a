from __future__ import annotations

from decimal import Decimal

import pytest

from foh.api import settings


def test_default_tax_percent_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("FOH_DEFAULT_TAX_PERCENT", "12.5")
    assert settings.default_tax_percent() == Decimal("12.5")


@pytest.mark.parametrize("raw", ["5.125", "abc", "101", "-1"])
def test_default_tax_percent_rejects_values_a_bill_cannot_store(monkeypatch, raw: str) -> None:
    monkeypatch.setenv("FOH_DEFAULT_TAX_PERCENT", raw)
    with pytest.raises(RuntimeError):
        settings.default_tax_percent()
