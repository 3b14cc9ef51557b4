"""Tests for catalogue loading."""

import json

import pytest
from pydantic import ValidationError

from promoscope.config.catalogues import DEFAULT_CATALOGUE_PATH, default_catalogues, load_catalogues


def test_bundled_catalogue_loads():
    catalogues = default_catalogues()

    assert catalogues.smartlink.asset_host == "imagestore.ffm.to"
    assert "direct" in catalogues.analytics.referrers
    assert catalogues.analytics.services[0].name == "Spotify"
    assert catalogues.analytics.services[0].icon
    assert "United Kingdom" in catalogues.analytics.countries
    assert catalogues.article.excerpt_max_length == 200
    assert catalogues.playlist.follower_units == ["likes?", "saves?", "followers?"]


def test_default_catalogues_cached():
    assert default_catalogues() is default_catalogues()


def test_catalogue_names_are_unique():
    analytics = default_catalogues().analytics
    assert len(set(analytics.referrers)) == len(analytics.referrers)
    assert len({s.name for s in analytics.services}) == len(analytics.services)
    assert len(set(analytics.countries)) == len(analytics.countries)


def test_replacement_file(tmp_path):
    data = json.loads(DEFAULT_CATALOGUE_PATH.read_text(encoding="utf-8"))
    data["analytics"]["countries"] = ["Iceland"]
    path = tmp_path / "catalogues.json"
    path.write_text(json.dumps(data), encoding="utf-8")

    assert load_catalogues(path).analytics.countries == ["Iceland"]


def test_incomplete_file_rejected(tmp_path):
    path = tmp_path / "catalogues.json"
    path.write_text(json.dumps({"smartlink": {}}), encoding="utf-8")

    with pytest.raises(ValidationError):
        load_catalogues(path)


def test_catalogues_are_frozen():
    with pytest.raises(ValidationError):
        default_catalogues().smartlink = None
