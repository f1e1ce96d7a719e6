from __future__ import annotations

import pytest

from magview.services.naming import (
    ImageRequest,
    MagNaming,
    build_direct_url,
    build_filename,
    build_proxy_url,
    decode_proxy_query,
    pad_cycle,
    pad_fhr,
)


def test_build_filename_pads_fhr_and_appends_minutes() -> None:
    assert build_filename("hrrr", "conus", 3, "ceiling", "") == "hrrr_conus_00300_ceiling.gif"
    assert build_filename("hrrr", "conus", 48, "vis") == "hrrr_conus_04800_vis.gif"


def test_build_filename_lowercases_inputs() -> None:
    assert build_filename("HRRR", "CONUS", 12, "Sim_Radar_Comp", "_L") == "hrrr_conus_01200_sim_radar_comp_l.gif"


def test_build_direct_url_joins_model_and_cycle() -> None:
    assert (
        build_direct_url("hrrr", "conus", 12, 3, "ceiling", "")
        == "https://mag.ncep.noaa.gov/data/hrrr12/hrrr_conus_00300_ceiling.gif"
    )
    assert (
        build_direct_url("hrrr", "conus", 6, 0, "ceiling")
        == "https://mag.ncep.noaa.gov/data/hrrr06/hrrr_conus_00000_ceiling.gif"
    )


def test_build_direct_url_custom_host() -> None:
    url = build_direct_url("hrrr", "conus", 1, 1, "vis", host="mag.example.test")
    assert url == "https://mag.example.test/data/hrrr01/hrrr_conus_00100_vis.gif"


def test_build_proxy_url_encodes_padded_fields() -> None:
    url = build_proxy_url("/api/mag", "hrrr", "conus", 7, 5, "ceiling")
    assert url == "/api/mag?model=hrrr&area=conus&cycle=07&fhr=005&param=ceiling"


def test_build_proxy_url_carries_size_only_when_set() -> None:
    assert "size=" not in build_proxy_url("/fn", "hrrr", "conus", 0, 0, "vis")
    assert build_proxy_url("/fn", "hrrr", "conus", 0, 0, "vis", "_s").endswith("&size=_s")


def test_padding_never_truncates_and_passes_malformed_values() -> None:
    assert pad_cycle(5) == "05"
    assert pad_cycle("123") == "123"
    assert pad_fhr(1234) == "1234"
    assert pad_fhr("-1") == "0-1"
    assert pad_cycle("") == "00"


@pytest.mark.parametrize("cycle_hour", [0, 3, 12, 23])
@pytest.mark.parametrize("forecast_hour", [0, 7, 48, 999])
@pytest.mark.parametrize("size", ["", "_l"])
def test_proxy_url_round_trips_to_direct_url(cycle_hour: int, forecast_hour: int, size: str) -> None:
    naming = MagNaming(proxy_base="/api/mag", size_suffix=size)
    request = naming.request(cycle_hour, forecast_hour, "2m_temp_10m_wnd")

    query = decode_proxy_query(naming.proxy_url(request))
    rebuilt = naming.request_from_query(query)

    assert naming.direct_url(rebuilt) == naming.direct_url(request)
    assert naming.direct_url(request) == build_direct_url(
        "hrrr", "conus", cycle_hour, forecast_hour, "2m_temp_10m_wnd", size
    )


def test_request_from_query_applies_defaults() -> None:
    naming = MagNaming()
    request = naming.request_from_query({})
    assert request == ImageRequest(model="hrrr", area="conus", cycle="00", fhr="000", param="ceiling", size="")


def test_request_from_query_treats_empty_values_as_missing() -> None:
    naming = MagNaming()
    request = naming.request_from_query({"model": "", "cycle": "", "fhr": "", "param": None})
    assert naming.direct_url(request) == "https://mag.ncep.noaa.gov/data/hrrr00/hrrr_conus_00000_ceiling.gif"


def test_request_from_query_does_not_validate_ranges() -> None:
    naming = MagNaming()
    request = naming.request_from_query({"cycle": "99", "fhr": "abc", "param": "VIS"})
    assert naming.direct_url(request) == "https://mag.ncep.noaa.gov/data/hrrr99/hrrr_conus_abc00_vis.gif"


def test_instances_with_different_hosts_coexist() -> None:
    a = MagNaming(host="a.test", proxy_base="/a")
    b = MagNaming(host="b.test", proxy_base="/b")
    request = a.request(0, 0, "vis")
    assert a.direct_url(request).startswith("https://a.test/")
    assert b.direct_url(request).startswith("https://b.test/")
    assert b.proxy_url(request).startswith("/b?")


def test_frame_urls_caption() -> None:
    naming = MagNaming()
    urls = naming.frame_urls(naming.request(12, 3, "ceiling"))
    assert urls["caption"] == "ceiling – HRRR CONUS 12Z F003"
    assert urls["filename"] == "hrrr_conus_00300_ceiling.gif"
