import pytest

from csii.core.config import ControllerConfig
from csii.core.policy import (
    DosingPolicy,
    ProportionalIOBStrategy,
    ThresholdTableStrategy,
    proportional_basal,
    strategy_for,
    threshold_basal,
)


# ---------------------------------------------------------------------------
# Proportional control
# ---------------------------------------------------------------------------

class TestProportionalBasal:
    def test_above_target(self):
        assert proportional_basal(150.0, iob=0.0) == pytest.approx(1.0)

    def test_below_target_clamps_to_zero(self):
        assert proportional_basal(90.0, iob=0.0) == 0.0

    def test_iob_is_subtracted(self):
        assert proportional_basal(200.0, iob=0.5) == pytest.approx(1.5)

    def test_iob_can_drive_rate_to_zero(self):
        assert proportional_basal(150.0, iob=3.0) == 0.0

    def test_nan_prediction_yields_zero(self):
        assert proportional_basal(float("nan")) == 0.0

    def test_custom_target_and_isf(self):
        assert proportional_basal(160.0, target_glucose=120.0, isf=40.0) == pytest.approx(1.0)


# ---------------------------------------------------------------------------
# Threshold table
# ---------------------------------------------------------------------------

class TestThresholdBasal:
    @pytest.mark.parametrize(
        "prediction, expected",
        [
            (301.0, 4.0),
            (300.0, 2.0),
            (200.0, 2.0),
            (199.9, 1.5),
            (150.0, 1.5),
            (149.9, 0.7),
            (120.0, 0.7),
            (119.9, 0.5),
            (80.0, 0.5),
            (79.9, 0.0),
            (-40.0, 0.0),
        ],
    )
    def test_bins(self, prediction, expected):
        assert threshold_basal(prediction) == expected

    def test_nan_falls_through_to_zero(self):
        assert threshold_basal(float("nan")) == 0.0


def test_strategy_for_builds_matching_strategy():
    config = ControllerConfig(target_glucose=110.0, insulin_sensitivity_factor=40.0)

    iob_strategy = strategy_for(DosingPolicy.IOB, config)
    table_strategy = strategy_for(DosingPolicy.THRESHOLD, config)

    assert isinstance(iob_strategy, ProportionalIOBStrategy)
    assert iob_strategy.target_glucose == 110.0
    assert iob_strategy.isf == 40.0
    assert iob_strategy.uses_iob and iob_strategy.skips_invalid_samples
    assert isinstance(table_strategy, ThresholdTableStrategy)
    assert not table_strategy.uses_iob and not table_strategy.skips_invalid_samples


def test_threshold_strategy_ignores_iob():
    assert ThresholdTableStrategy().basal_rate(250.0, iob=10.0) == 2.0


def test_policy_from_name():
    assert DosingPolicy.from_name("IOB") is DosingPolicy.IOB
    assert DosingPolicy.from_name("threshold") is DosingPolicy.THRESHOLD
    with pytest.raises(ValueError, match="Unknown dosing policy"):
        DosingPolicy.from_name("pid")
