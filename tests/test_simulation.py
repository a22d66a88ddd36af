import random

import pytest

from disruption_analyzer.models import DisruptionSimulationParams, Level
from disruption_analyzer.simulation import (
    IMP_DELAY,
    SITE_CLOSURE,
    STAFF_SHORTAGE,
    analyze_trial_text,
    is_default,
)


def test_defaults_for_empty_text():
    params = analyze_trial_text("")
    assert params == DisruptionSimulationParams(
        site_id="001", disruption_type=IMP_DELAY, severity=Level.MEDIUM, product="Drug A"
    )
    assert is_default(params)


def test_critical_imp_delay_scenario():
    params = analyze_trial_text("Site 002 IMP Delay Drug B critical shortage")
    assert params.site_id == "002"
    assert params.disruption_type == IMP_DELAY
    assert params.severity == Level.HIGH
    assert params.product == "Drug B"
    assert not is_default(params)


def test_site_id_is_zero_padded():
    assert analyze_trial_text("Issue reported by site 7").site_id == "007"


def test_first_site_wins():
    assert analyze_trial_text("Site 12 then Site 3").site_id == "012"


@pytest.mark.parametrize("text, expected", [
    ("Planned site closure: the site will close and shut down", SITE_CLOSURE),
    ("Staff shortage, personnel unavailable", STAFF_SHORTAGE),
    ("Shipment delay at the depot", IMP_DELAY),
    ("Staff will close the clinic", IMP_DELAY),
])
def test_disruption_type(text, expected):
    assert analyze_trial_text(text).disruption_type == expected


@pytest.mark.parametrize("text, expected", [
    ("urgent and critical", Level.HIGH),
    ("minor issue", Level.LOW),
    ("critical but minor", Level.MEDIUM),
    ("nothing notable", Level.MEDIUM),
])
def test_severity(text, expected):
    assert analyze_trial_text(text).severity == expected


def test_product_needs_single_letter():
    assert analyze_trial_text("IMP Delay at the depot").product == "Drug A"
    assert analyze_trial_text("product c is late").product == "Drug C"


@pytest.mark.parametrize("seed", range(10))
def test_deterministic(seed):
    rng = random.Random(seed)
    words = ["Site 4", "drug Q", "critical", "minor", "closure", "staff", "delay", "supply", "the", "x"]
    text = " ".join(rng.choice(words) for _ in range(50))
    assert analyze_trial_text(text) == analyze_trial_text(text)
