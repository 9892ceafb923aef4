import pytest

from b3_master.portfolio.models import SimulationParams
from b3_master.portfolio.simulator import (
    final_result,
    monthly_rate_from_annual,
    parse_amount,
    simulate_compound_growth,
)


def test_one_year_projection_matches_closed_form() -> None:
    points = simulate_compound_growth(SimulationParams(1000.0, 500.0, 12.0, 1))
    rate = monthly_rate_from_annual(12.0)
    expected = 1000.0 * (1 + rate) ** 12 + 500.0 * ((1 + rate) ** 12 - 1) / rate

    assert rate == pytest.approx(0.009489, abs=1e-6)
    assert final_result(points).balance == pytest.approx(expected, abs=0.01)
    assert final_result(points).invested == pytest.approx(7000.0)


def test_points_cover_every_year_including_start() -> None:
    points = simulate_compound_growth(SimulationParams(2500.0, 300.0, 10.0, 5))

    assert [point.year for point in points] == [0, 1, 2, 3, 4, 5]
    assert points[0].balance == 2500.0
    assert points[0].invested == 2500.0


def test_balance_is_monotonic_with_non_negative_rate() -> None:
    points = simulate_compound_growth(SimulationParams(0.0, 100.0, 0.0, 3))
    balances = [point.balance for point in points]

    assert balances == sorted(balances)
    assert final_result(points).balance == pytest.approx(3600.0)


def test_zero_contribution_grows_capital_by_annual_rate() -> None:
    points = simulate_compound_growth(SimulationParams(1000.0, 0.0, 10.0, 2))

    assert points[1].balance == pytest.approx(1100.0, abs=0.01)
    assert points[2].balance == pytest.approx(1210.0, abs=0.01)


def test_long_horizon_has_no_upper_bound() -> None:
    points = simulate_compound_growth(SimulationParams(1000.0, 0.0, 0.0, 101))

    assert len(points) == 102
    assert final_result(points).balance == pytest.approx(1000.0)


def test_total_loss_rate_keeps_only_latest_contribution() -> None:
    points = simulate_compound_growth(SimulationParams(100.0, 5.0, -100.0, 1))

    assert monthly_rate_from_annual(-100.0) == -1.0
    assert final_result(points).balance == pytest.approx(5.0)
    assert final_result(points).invested == pytest.approx(160.0)


@pytest.mark.parametrize(
    "params",
    [
        SimulationParams(-1.0, 100.0, 10.0, 1),
        SimulationParams(100.0, -5.0, 10.0, 1),
        SimulationParams(100.0, 5.0, -100.5, 1),
        SimulationParams(100.0, 5.0, 10.0, 0),
        SimulationParams(100.0, 5.0, 10.0, 2.5),
    ],
)
def test_invalid_params_raise(params: SimulationParams) -> None:
    with pytest.raises(ValueError):
        simulate_compound_growth(params)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1.234,56", 1234.56),
        ("R$ 500", 500.0),
        ("12%", 12.0),
        ("7.5", 7.5),
        (42, 42.0),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
    ],
)
def test_parse_amount(raw: object, expected: float) -> None:
    assert parse_amount(raw) == pytest.approx(expected)
