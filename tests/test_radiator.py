"""
tests/test_radiator.py
Tests for domain/radiator.py (catalog output, design flow and valve presets).
"""
import pytest
import sys, pathlib
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from domain.radiator import (
    NO_PRESET, WATER_CP, design_flow_lps, detect_valve_brand, find_model, list_brands,
    list_series, mean_excess_temperature, nominal_output, recommend_preset, size_radiator,
    water_delta_t,
)


class TestCatalog:
    def test_brands_sorted(self):
        assert list_brands() == ["Kermi", "Purmo", "Vogel & Noot"]

    def test_series_filtered_by_brand(self):
        assert list_series("Kermi") == ["Profil-K"]

    def test_find_model_needs_both_keys(self):
        assert find_model("Kermi", None) is None
        assert find_model("Kermi", "Profil-K").type == "panel"


class TestRegimes:
    def test_mean_excess(self):
        assert mean_excess_temperature("75/65/20") == pytest.approx(50.0)
        assert mean_excess_temperature("55/45/20") == pytest.approx(30.0)

    def test_unusable_regime(self):
        assert mean_excess_temperature("abc") == 0.0
        assert water_delta_t("abc") == pytest.approx(10.0)

    @pytest.mark.parametrize("regime,expected", [("75/65/20", 10.0), ("70/55/20", 15.0), ("55/45/20", 10.0)])
    def test_water_delta_t(self, regime, expected):
        assert water_delta_t(regime) == pytest.approx(expected)


class TestNominalOutput:
    def test_table_value_at_catalog_regime(self):
        assert nominal_output("Kermi", "Profil-K", 600, 600) == pytest.approx(1080.0)

    def test_lower_regime_scales_down(self):
        out = nominal_output("Kermi", "Profil-K", 600, 1000, "55/45/20")
        assert out == pytest.approx(1750 * (30 / 50) ** 1.3, abs=1.0)
        assert out < 1750

    def test_unknown_model_or_size(self):
        assert nominal_output("Acme", "X", 600, 600) is None
        assert nominal_output("Kermi", "Profil-K", 900, 600) is None
        assert nominal_output("Kermi", "Profil-K", None, 600) is None


class TestFlowAndPresets:
    def test_design_flow(self):
        assert design_flow_lps(1000) == pytest.approx(1000 / (WATER_CP * 10))

    def test_no_output_no_flow(self):
        assert design_flow_lps(0) == 0.0
        assert design_flow_lps("abc") == 0.0

    @pytest.mark.parametrize("text,brand", [
        ("Danfoss RA-N", "Danfoss"),
        ("OVENTROP AV9", "Oventrop"),
        ("Heimeier V-exact", "Heimeier"),
        (None, "Heimeier"),
    ])
    def test_detect_valve_brand(self, text, brand):
        assert detect_valve_brand(text) == brand

    @pytest.mark.parametrize("flow,brand,preset", [
        (0.004, "Heimeier", "1"),
        (0.02, "Heimeier", "4"),
        (0.1, "Heimeier", "6"),
        (0.02, "Danfoss", "5"),
        (0.1, "Danfoss", "7"),
        (0.02, "Unbekannt", "4"),
    ])
    def test_recommend_preset(self, flow, brand, preset):
        assert recommend_preset(flow, brand) == preset

    def test_zero_flow_has_no_preset(self):
        assert recommend_preset(0) == NO_PRESET

    def test_size_radiator(self):
        s = size_radiator(1000, valve_text="Danfoss")
        assert s.valve_brand == "Danfoss"
        assert s.flow_l_h == pytest.approx(1000 / (WATER_CP * 10) * 3600)
        assert s.preset == "5"
