"""Outbound message template tests."""

from datetime import datetime, timezone

import pytest

from wsafe.services.location import Fix, format_accuracy, format_coordinate, map_link, nearby_search_link
from wsafe.services.messages import LOCATION_UNAVAILABLE

T = datetime(2026, 3, 8, 21, 15, 0, tzinfo=timezone.utc)


def test_map_link_uses_compact_coordinates():
    fix = Fix(lat=10, lng=20, accuracy=5, timestamp=T)
    assert map_link("https://maps.google.com/", fix) == "https://maps.google.com/?q=10,20"


def test_map_link_keeps_precision():
    fix = Fix(lat=12.9715987, lng=-77.594566, accuracy=None, timestamp=T)
    assert map_link("https://maps.example/", fix) == "https://maps.example/?q=12.9715987,-77.594566"


@pytest.mark.parametrize(
    "value, expected",
    [(10.0, "10"), (-0.0, "0"), (0.5, "0.5"), (-33.86785, "-33.86785")],
)
def test_format_coordinate(value, expected):
    assert format_coordinate(value) == expected


def test_accuracy_rounds_to_meters():
    assert format_accuracy(5) == "5m"
    assert format_accuracy(4.6) == "5m"
    assert format_accuracy(12.2) == "12m"
    assert format_accuracy(None) == "N/A"


def test_activation_message_fields(composer):
    fix = Fix(lat=10, lng=20, accuracy=5, timestamp=T)
    text = composer.activation("panic button", T, fix)
    assert "EMERGENCY SOS ALERT" in text
    assert "Trigger: panic button" in text
    assert "q=10,20" in text
    assert "Accuracy: 5m" in text
    assert "08 Mar 2026, 21:15:00 UTC" in text
    assert "every 10 seconds" in text
    assert "W-Safe Pro" in text


def test_activation_without_fix_has_placeholder(composer):
    text = composer.activation("shake", T, None)
    assert LOCATION_UNAVAILABLE in text
    assert "Accuracy: N/A" in text
    assert "?q=" not in text


def test_live_update_is_short_form(composer):
    fix = Fix(lat=1.5, lng=2.25, accuracy=None, timestamp=T)
    text = composer.live_update(fix)
    assert text.startswith("SOS Alert! I am in danger.")
    assert "Location: https://maps.google.com/?q=1.5,2.25" in text
    assert "Accuracy: N/A" in text
    assert "Trigger" not in text


def test_deactivation_message(composer):
    fix = Fix(lat=10, lng=20, accuracy=5, timestamp=T)
    assert "Final Location: https://maps.google.com/?q=10,20" in composer.deactivation(T, fix)
    assert f"Final Location: {LOCATION_UNAVAILABLE}" in composer.deactivation(T, None)


def test_nearby_search_link():
    fix = Fix(lat=10, lng=20, accuracy=5, timestamp=T)
    assert nearby_search_link("police", fix) == "https://www.google.com/maps/search/police+station/@10,20,15z"
    assert nearby_search_link("hospital", fix).startswith("https://www.google.com/maps/search/hospital/")
    with pytest.raises(ValueError):
        nearby_search_link("bakery", fix)
