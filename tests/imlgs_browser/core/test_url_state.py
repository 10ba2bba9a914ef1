from __future__ import annotations

from imlgs_browser.core.url_state import UrlState, get_id_from_url, get_url_param, restore_selection

OPTIONS = [("All", 4), ("Atlantis", 2), ("Knorr", 2)]


def test_from_url_reads_params_and_fragment():
    url = UrlState.from_url("https://example.org/browse?repository=OSU&platform=Knorr#imlgs0003")

    assert get_url_param(url, "repository") == "OSU"
    assert get_url_param(url, "platform") == "Knorr"
    assert get_url_param(url, "device") is None
    assert get_id_from_url(url) == "imlgs0003"


def test_from_location_matches_dash_location_parts():
    url = UrlState.from_location("?cruise=KN5", "#imlgs%200001")

    assert url.param("cruise") == "KN5"
    assert get_id_from_url(url) == "imlgs 0001"


def test_missing_parts():
    assert get_id_from_url(UrlState.from_url("https://example.org/")) is None
    assert get_id_from_url(None) is None
    assert get_url_param(None, "platform") is None
    assert UrlState.from_location(None, None) == UrlState()


def test_restore_selection_is_case_insensitive():
    assert restore_selection(OPTIONS, "knorr") == "Knorr"
    assert restore_selection(OPTIONS, "ATLANTIS") == "Atlantis"


def test_restore_selection_falls_back_to_all():
    assert restore_selection(OPTIONS, "Thompson") is None
    assert restore_selection(OPTIONS, None) is None
    assert restore_selection(OPTIONS, "") is None
