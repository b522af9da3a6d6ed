"""
tests/test_ventilation.py
Tests for domain/ventilation.py (alias adapter and loss formulas).
"""
import pytest
import sys, pathlib
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from domain.defaults import AIR_DENSITY, AIR_HEAT_CAPACITY
from domain.ventilation import (
    VentilationConfig, air_loss_w, estimate_ventilation_w, infiltration_loss_w,
    mechanical_flow_m3_s, normalize_efficiency, normalize_ventilation, ventilation_loss_w,
    with_heat_recovery_percent, with_room_type,
)


class TestNormalizeEfficiency:
    @pytest.mark.parametrize("raw,expected", [
        (0.8, 0.8),
        (80, 0.8),
        ("85", 0.85),
        (1, 0.95),
        (120, 0.95),
        (-5, 0.0),
    ])
    def test_fraction_or_percent(self, raw, expected):
        assert normalize_efficiency(raw) == pytest.approx(expected)

    def test_unparseable(self):
        assert normalize_efficiency("n/a") is None


class TestNormalizeVentilation:
    def test_none_passthrough(self):
        assert normalize_ventilation(None) is None

    def test_ach_aliases_first_positive_wins(self):
        cfg = normalize_ventilation({"airChangesPerHour": 0, "ach": "0,7", "airExchangeRate": 2})
        assert cfg.air_change_rate == pytest.approx(0.7)

    def test_only_zero_ach_is_zero_not_unset(self):
        cfg = normalize_ventilation({"ach": 0})
        assert cfg.air_change_rate == 0.0

    def test_missing_ach_is_unset(self):
        assert normalize_ventilation({}).air_change_rate is None

    def test_flow_alias(self):
        cfg = normalize_ventilation({"supplyFlowM3h": 60})
        assert cfg.flow_m3h == pytest.approx(60.0)

    def test_efficiency_percent_field(self):
        cfg = normalize_ventilation({"ventilationSystem": True, "heatRecoveryPercent": 75})
        assert cfg.heat_recovery_efficiency == pytest.approx(0.75)
        assert cfg.efficiency == pytest.approx(0.75)

    def test_efficiency_ignored_without_system(self):
        cfg = normalize_ventilation({"ventilationSystem": False, "etaHRV": 0.9})
        assert cfg.efficiency == 0.0

    def test_system_without_eta_uses_default(self):
        assert normalize_ventilation({"ventilationSystem": True}).efficiency == pytest.approx(0.8)

    def test_enabled_alias(self):
        assert normalize_ventilation({"includeInCalc": False}).enabled is False

    def test_infiltration_ach_is_not_a_mechanical_rate(self):
        cfg = normalize_ventilation({"infiltrationACH": 0.5})
        assert cfg.air_change_rate is None
        assert cfg.infiltration_ach == pytest.approx(0.5)

    def test_efficiency_capped_at_recovery_maximum(self):
        cfg = VentilationConfig(ventilation_system=True, heat_recovery_efficiency=0.97)
        assert cfg.efficiency == pytest.approx(0.95)


class TestBuilders:
    def test_room_type_seeds_defaults(self):
        cfg = with_room_type(None, "bathroom")
        assert (cfg.target_temp, cfg.air_change_rate) == (24.0, 1.0)

    def test_unknown_room_type_maps_to_custom(self):
        cfg = with_room_type(VentilationConfig(), "sauna")
        assert (cfg.target_temp, cfg.air_change_rate) == (20.0, 0.5)

    def test_percent_builder(self):
        cfg = with_heat_recovery_percent(VentilationConfig(), 90)
        assert cfg.heat_recovery_efficiency == pytest.approx(0.9)


class TestLossFormulas:
    def test_air_loss_zero_when_no_flow_or_dt(self):
        assert air_loss_w(0.0, 30) == 0.0
        assert air_loss_w(0.01, 0) == 0.0
        assert air_loss_w(0.01, -5) == 0.0

    def test_flow_from_ach_and_volume(self):
        cfg = VentilationConfig(air_change_rate=0.5)
        assert mechanical_flow_m3_s(cfg, 72.0) == pytest.approx(0.01)

    def test_explicit_flow_wins(self):
        cfg = VentilationConfig(air_change_rate=0.5, flow_m3h=36.0)
        assert mechanical_flow_m3_s(cfg, 1000.0) == pytest.approx(0.01)

    def test_disabled_has_no_flow(self):
        assert mechanical_flow_m3_s(VentilationConfig(air_change_rate=1, enabled=False), 50) == 0.0

    def test_heat_recovery_scales_loss(self):
        full = ventilation_loss_w(0.01, 30, 0.0)
        recovered = ventilation_loss_w(0.01, 30, 0.8)
        assert full == pytest.approx(0.01 * AIR_DENSITY * AIR_HEAT_CAPACITY * 30)
        assert recovered == pytest.approx(0.2 * full)

    def test_infiltration_has_no_recovery(self):
        assert infiltration_loss_w(72.0, 0.5, 30) == pytest.approx(air_loss_w(0.01, 30))

    def test_estimate(self):
        cfg = VentilationConfig(air_change_rate=0.5, ventilation_system=True, heat_recovery_efficiency=0.5)
        # 0.33 · 36 m³/h · 30 K · 0.5
        assert estimate_ventilation_w(cfg, 72.0, 30) == pytest.approx(178.2)

    def test_estimate_falls_back_to_infiltration_rate(self):
        cfg = VentilationConfig(infiltration_ach=0.5)
        # 0.33 · 36 m³/h · 30 K
        assert estimate_ventilation_w(cfg, 72.0, 30) == pytest.approx(356.4)
