import math
from datetime import datetime, timedelta

import pytest

from csii.core.iob import BolusRecord, InsulinOnBoard

T0 = datetime(2024, 1, 1, 8, 0)


def test_single_bolus_decays_exponentially():
    ledger = InsulinOnBoard()
    ledger.add_bolus(1.0, T0)

    for minutes in (0, 15, 45, 90, 179):
        expected = math.exp(-math.log(2) / 60 * minutes)
        assert ledger.current_iob(T0 + timedelta(minutes=minutes)) == pytest.approx(expected)


def test_half_life_is_sixty_minutes():
    ledger = InsulinOnBoard()
    ledger.add_bolus(1.0, T0)

    assert ledger.current_iob(T0 + timedelta(minutes=60)) == pytest.approx(0.5)


def test_record_is_pruned_at_duration():
    ledger = InsulinOnBoard()
    ledger.add_bolus(1.0, T0)

    assert ledger.current_iob(T0 + timedelta(minutes=180)) == 0.0
    assert len(ledger) == 0


def test_doses_sum_independently():
    ledger = InsulinOnBoard()
    ledger.add_bolus(2.0, T0)
    ledger.add_bolus(1.0, T0 + timedelta(minutes=60))

    iob = ledger.current_iob(T0 + timedelta(minutes=120))

    assert iob == pytest.approx(2.0 * 0.25 + 1.0 * 0.5)


def test_prune_removes_only_expired_records():
    ledger = InsulinOnBoard()
    ledger.add_bolus(1.0, T0)
    ledger.add_bolus(1.0, T0 + timedelta(minutes=100))

    removed = ledger.prune(T0 + timedelta(minutes=200))

    assert removed == 1
    assert [r.administered_at for r in ledger.records] == [T0 + timedelta(minutes=100)]


def test_negative_dose_is_rejected():
    with pytest.raises(ValueError, match="INVALID_DOSE_ERROR"):
        BolusRecord(dose=-0.5, administered_at=T0)


def test_records_are_immutable():
    record = BolusRecord(dose=1.0, administered_at=T0)
    with pytest.raises(Exception):
        record.dose = 2.0  # type: ignore[misc]
