from berry_events.services.addon_suggestions import (
    DEFAULT_POLICY,
    SuggestionPolicy,
    suggest_add_ons,
)


def _ids(add_ons):
    return [a.id for a in add_ons]


def test_keyword_match_is_case_insensitive():
    assert _ids(suggest_add_ons("cleaning", "The OVEN is filthy")) == ["inside-oven"]


def test_matches_keep_catalog_order():
    found = _ids(suggest_add_ons("plumbing", "burst geyser pipe in the roof"))
    assert found == ["pipe-repair", "water-heater"]


def test_short_text_returns_nothing():
    assert suggest_add_ons("cleaning", " ov ") == []


def test_min_chars_can_be_lowered():
    assert _ids(suggest_add_ons("cleaning", "rug", min_chars=2)) == ["carpet-clean"]


def test_unknown_category_returns_nothing():
    assert suggest_add_ons("astronomy", "telescope windows") == []


def test_service_id_is_accepted_as_category():
    assert _ids(suggest_add_ons("house-cleaning", "dirty windows")) == ["windows"]


def test_default_policy():
    assert DEFAULT_POLICY == SuggestionPolicy(min_chars=3, debounce_ms=400)
