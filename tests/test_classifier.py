import pytest

from scorer_api.classifier import classify_delivery
from scorer_api.errors import InvalidDeliveryError


def test_legal_delivery_has_no_extra():
    out = classify_delivery(4)
    assert out.legal_delivery is True
    assert out.extra_runs == 0
    assert out.batsman_runs == 4
    assert out.total_runs == 4


def test_wide_adds_one_extra_and_is_not_legal():
    out = classify_delivery(0, is_wide=True)
    assert out.legal_delivery is False
    assert out.extra_runs == 1
    assert out.total_runs == 1


def test_no_ball_keeps_batsman_runs():
    out = classify_delivery(6, is_no_ball=True)
    assert out.legal_delivery is False
    assert out.batsman_runs == 6
    assert out.extra_runs == 1
    assert out.total_runs == 7


def test_wicket_flag_passes_through():
    assert classify_delivery(0, is_wicket=True).is_wicket is True


def test_wide_and_no_ball_together_rejected():
    with pytest.raises(InvalidDeliveryError):
        classify_delivery(0, is_no_ball=True, is_wide=True)


@pytest.mark.parametrize("runs", [-1, 7, 2.5, True])
def test_runs_out_of_range_rejected(runs):
    with pytest.raises(InvalidDeliveryError):
        classify_delivery(runs)
