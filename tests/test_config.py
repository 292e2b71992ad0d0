import logging

import pytest

import config


def test_log_level_from_name(monkeypatch):
    monkeypatch.setattr(config, 'LOG_LEVEL_NAME', 'DEBUG')
    assert config.get_log_level() == logging.DEBUG


def test_invalid_log_level(monkeypatch):
    monkeypatch.setattr(config, 'LOG_LEVEL_NAME', 'CHATTY')
    with pytest.raises(ValueError, match="CVP_LOG_LEVEL"):
        config.get_log_level()


def test_defaults_are_valid_inputs():
    from calculator import Parameters, compute

    assert compute(Parameters(**config.BASIC_DEFAULTS))
    assert compute(Parameters(**config.DASHBOARD_DEFAULTS))
    assert set(config.SENSITIVITY_DEFAULTS) == {
        'price_change', 'variable_cost_change', 'fixed_cost_change', 'tax_rate_change'
    }
