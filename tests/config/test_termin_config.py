"""
Tests for termin configuration loading and the config -> kernel bridge.
"""

from decimal import Decimal

import pytest
import yaml

from studio_config import DEFAULT_CONFIG_PATH, get_active_config
from studio_config.bridges import build_termin_policy
from studio_config.loader import compute_checksum, parse_termin_config
from studio_engines.templates import template_for
from studio_kernel.domain.contract import DEFAULT_POLICY, Category
from studio_kernel.exceptions import InvalidCurrencyError, UnknownCategoryError


def _base(**overrides) -> dict:
    data = {
        "config_id": "test",
        "version": 1,
        "currency": "idr",
        "down_payment_amount": 2500000,
        "default_unit_price": 200000,
    }
    data.update(overrides)
    return data


class TestDefaultConfig:

    def test_shipped_defaults_match_policy(self):
        config = get_active_config()

        assert config.config_id == "studio-default"
        assert config.currency == "IDR"
        assert config.down_payment_amount == Decimal("2500000")
        assert config.default_unit_price == Decimal("200000")
        assert config.templates == ()
        assert build_termin_policy(config) == DEFAULT_POLICY

    def test_trace_emitted(self, captured_logs):
        config = get_active_config(DEFAULT_CONFIG_PATH)

        traces = [r for r in captured_logs() if r["message"] == "STUDIO_CONFIG_TRACE"]
        assert traces
        assert traces[0]["checksum"] == config.checksum

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "missing.yaml")


class TestParsing:

    def test_currency_normalized(self):
        assert parse_termin_config(_base()).currency == "IDR"

    def test_missing_required_key(self):
        data = _base()
        del data["down_payment_amount"]

        with pytest.raises(KeyError):
            parse_termin_config(data)

    @pytest.mark.parametrize("value", ["lots", -1, True])
    def test_bad_amount(self, value):
        with pytest.raises(ValueError):
            parse_termin_config(_base(default_unit_price=value))

    def test_templates(self):
        config = parse_termin_config(_base(templates={
            "Interior": [
                {"label": "Booking", "spec": "50%"},
                "Pelunasan",
            ],
        }))

        assert len(config.templates) == 1
        template = config.templates[0]
        assert template.category == "interior"
        assert [(line.label, line.spec) for line in template.lines] == [
            ("Booking", "50%"),
            ("Termin 2", "Pelunasan"),
        ]

    def test_empty_template_rejected(self):
        with pytest.raises(ValueError):
            parse_termin_config(_base(templates={"civil": []}))

    def test_checksum_deterministic(self):
        assert compute_checksum(_base()) == compute_checksum(dict(reversed(_base().items())))
        assert compute_checksum(_base()) != compute_checksum(_base(version=2))

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "termin.yaml"
        path.write_text(yaml.safe_dump(_base(down_payment_amount=3000000)))

        config = get_active_config(path)

        assert config.down_payment_amount == Decimal("3000000")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("config_id: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            get_active_config(path)


class TestBridge:

    def test_template_overrides_reach_engine(self):
        config = parse_termin_config(_base(templates={"sipil": ["50%", "Pelunasan"]}))

        policy = build_termin_policy(config)
        milestones = template_for(Category.CIVIL, policy.template_overrides)

        assert [m.spec for m in milestones] == ["50%", "Pelunasan"]

    def test_unknown_template_category(self):
        config = parse_termin_config(_base(templates={"landscape": ["100%"]}))

        with pytest.raises(UnknownCategoryError):
            build_termin_policy(config)

    def test_unsupported_currency(self):
        config = parse_termin_config(_base(currency="XYZ"))

        with pytest.raises(InvalidCurrencyError):
            build_termin_policy(config)
