"""Tests for catalogue lookup and wait-estimate wording."""

import pytest

from kitchen_queue.services.localization import CATALOGUES, Localizer
from kitchen_queue.services.queue.estimator import READY, SOON, UNSPECIFIED, WaitEstimate, WaitKind


@pytest.fixture
def localizer():
    return Localizer("en")


def test_catalogues_share_the_same_keys():
    assert set(CATALOGUES["ar"]) == set(CATALOGUES["en"])


@pytest.mark.parametrize(
    "lang, expected",
    [("ar", "ar"), ("AR", "ar"), ("ar-SA", "ar"), ("fr", "en"), (None, "en"), ("", "en")],
)
def test_resolve_language(localizer, lang, expected):
    assert localizer.resolve_language(lang) == expected


def test_default_language_is_used_when_none_given():
    assert Localizer("ar").text("ready") == CATALOGUES["ar"]["ready"]
    assert Localizer("de").default_language == "en"


def test_rtl_only_for_arabic(localizer):
    assert localizer.is_rtl("ar")
    assert not localizer.is_rtl("en")
    assert not localizer.is_rtl()


def test_unknown_key_is_returned_as_is(localizer):
    assert localizer.text("no_such_key") == "no_such_key"


def test_missing_translation_falls_back_to_english():
    localizer = Localizer(catalogues={"en": {"soon": "Soon"}, "ar": {}})
    assert localizer.text("soon", "ar") == "Soon"


@pytest.mark.parametrize(
    "estimate, en",
    [
        (READY, "Ready for pickup"),
        (SOON, "Soon"),
        (UNSPECIFIED, "Not specified"),
        (WaitEstimate(WaitKind.MINUTES, 7), "7 min"),
    ],
)
def test_describe_wait(localizer, estimate, en):
    assert localizer.describe_wait(estimate) == en


def test_describe_wait_in_arabic(localizer):
    assert localizer.describe_wait(WaitEstimate(WaitKind.MINUTES, 3), "ar") == "3 دقيقة"
    assert localizer.describe_wait(READY, "ar") == CATALOGUES["ar"]["ready_to_pickup"]


def test_labels_cover_the_board_headers(localizer):
    labels = localizer.labels("ar")
    for key in ("order_queue_list", "order_number", "status", "waiting_time_minutes", "order_time"):
        assert labels[key] == CATALOGUES["ar"][key]
