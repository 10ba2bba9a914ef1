from __future__ import annotations

from imlgs_browser.core.record import (
    IGSN_PROPERTY_ID,
    IMLGS_PROPERTY_ID,
    SAMPLE_PROPERTY_ID,
    format_dict,
    interval_comment,
    jd_to_date,
    record_to_jsonld,
)


def test_jsonld_with_igsn():
    jld = record_to_jsonld(
        {"imlgs": "imlgs0001", "sample": "AT01-D1", "igsn": "IEAAA0001"},
        origin="https://example.org",
    )

    assert jld["@context"] == "https://schema.org/"
    assert jld["@type"] == "Thing"
    assert jld["isPartOf"] == "https://example.org"
    assert jld["name"] == "AT01-D1"
    assert [i["propertyID"] for i in jld["identifier"]] == [
        SAMPLE_PROPERTY_ID,
        IMLGS_PROPERTY_ID,
        IGSN_PROPERTY_ID,
    ]
    assert jld["identifier"][2]["value"] == "IEAAA0001"


def test_jsonld_without_igsn():
    jld = record_to_jsonld({"imlgs": "imlgs0002", "sample": "AT01-C2", "igsn": None})

    assert len(jld["identifier"]) == 2
    assert jld["isPartOf"] is None


def test_jd_to_date():
    assert jd_to_date(2451545.0) == "2000-01-01"
    assert jd_to_date(2440587.5) == "1970-01-01"
    assert jd_to_date(None) is None


def test_format_dict():
    assert format_dict({"color": "grey", "grain": "fine"}) == "color: grey; grain: fine"
    assert format_dict(None) == ""
    assert format_dict("plain") == "plain"


def test_interval_comment():
    interval = {"int_comments": "weathered rind", "description": "basalt", "remarks": None}
    assert interval_comment(interval) == "weathered rind; basalt"
