from __future__ import annotations

import asyncio
from pathlib import Path

import duckdb
import pytest

from imlgs_browser.core.dataset import DatasetView

GEOMETRY = (
    "CASE WHEN lon IS NULL OR lat IS NULL THEN NULL "
    "ELSE concat('POINT (', lon, ' ', lat, ')') END AS geometry"
)

RECORD_FIELDS = [
    "imlgs",
    "sample",
    "igsn",
    "platform",
    "device",
    "facility",
    "cruise",
    "intervals",
    GEOMETRY,
    "begin_jd",
]

TABLE_FIELDS = [
    "imlgs",
    "platform",
    "device",
    "facility.facility_code AS repository",
]

SPATIAL_FIELDS = [
    "imlgs",
    "lon",
    "lat",
    "facility.facility_code AS repository",
]


def write_samples_parquet(path: Path) -> Path:
    """
    Five samples:

    imlgs      platform  device  repository  cruise  lon/lat
    imlgs0001  Atlantis  Dredge  OSU         AT01    yes
    imlgs0002  Atlantis  Core    OSU         AT01    yes
    imlgs0003  Knorr     Grab    WHOI        KN5     yes
    imlgs0004  Knorr     Dredge  WHOI        KN5     no
    imlgs0005  NULL      Core    LDEO        L1      yes
    """
    con = duckdb.connect()
    try:
        con.execute(
            """
            CREATE TABLE samples AS
            SELECT imlgs, sample, igsn, description, platform, device, facility, cruise,
                   CAST(lon AS DOUBLE) AS lon, CAST(lat AS DOUBLE) AS lat,
                   CAST(begin_jd AS DOUBLE) AS begin_jd, intervals
            FROM (VALUES
                ('imlgs0001', 'AT01-D1', 'IEAAA0001', 'Basalt from dredge', 'Atlantis', 'Dredge',
                 {'facility_code': 'OSU', 'facility': 'Oregon State University', 'other_link': 'https://osu.example/archive'},
                 {'cruise': 'AT01'}, -125.0, 44.5, 2451545.0,
                 [{'depth_top': 0, 'depth_bot': 10, 'int_comments': 'weathered rind', 'description': 'basalt', 'remarks': 'glassy'}]),
                ('imlgs0002', 'AT01-C2', NULL, 'Mud core', 'Atlantis', 'Core',
                 {'facility_code': 'OSU', 'facility': 'Oregon State University', 'other_link': 'https://osu.example/archive'},
                 {'cruise': 'AT01'}, -125.5, 44.0, NULL, NULL),
                ('imlgs0003', 'KN5-G1', 'IEAAA0003', 'Sand grab', 'Knorr', 'Grab',
                 {'facility_code': 'WHOI', 'facility': 'Woods Hole', 'other_link': 'https://whoi.example/archive'},
                 {'cruise': 'KN5'}, -70.0, 41.5, NULL, NULL),
                ('imlgs0004', 'KN5-D7', NULL, NULL, 'Knorr', 'Dredge',
                 {'facility_code': 'WHOI', 'facility': 'Woods Hole', 'other_link': 'https://whoi.example/archive'},
                 {'cruise': 'KN5'}, NULL, NULL, NULL, NULL),
                ('imlgs0005', 'L1-C1', NULL, 'Lake sediment core', NULL, 'Core',
                 {'facility_code': 'LDEO', 'facility': 'Lamont', 'other_link': 'https://ldeo.example/archive'},
                 {'cruise': 'L1'}, -80.0, 43.0, NULL, NULL)
            ) t(imlgs, sample, igsn, description, platform, device, facility, cruise, lon, lat, begin_jd, intervals)
            """
        )
        con.execute(f"COPY samples TO '{path}' (FORMAT PARQUET)")
    finally:
        con.close()
    return path


@pytest.fixture
def samples_parquet(tmp_path: Path) -> Path:
    return write_samples_parquet(tmp_path / "samples.parquet")


def make_view(source: Path, **kwargs) -> DatasetView:
    kwargs.setdefault("data_view", "samples")
    kwargs.setdefault("display_fields", TABLE_FIELDS)
    kwargs.setdefault("record_fields", RECORD_FIELDS)
    kwargs.setdefault("spatial_fields", SPATIAL_FIELDS)
    return DatasetView(str(source), **kwargs)


@pytest.fixture
def view_factory(samples_parquet: Path):
    def _make(**kwargs) -> DatasetView:
        return make_view(samples_parquet, **kwargs)

    return _make


@pytest.fixture
def view(view_factory):
    v = view_factory()
    asyncio.run(v.initialize())
    yield v
    v.close()
