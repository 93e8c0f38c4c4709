from __future__ import annotations

from src.ingestion.feed_config import DEFAULT_FEED, load_feed_config


def test_missing_file_uses_defaults(tmp_path):
    config = load_feed_config(str(tmp_path / "nope.yaml"), timeout_seconds=7)
    assert config.url == DEFAULT_FEED["url"]
    assert config.timeout_seconds == 7
    assert config.headers()["Referer"] == DEFAULT_FEED["referer"]


def test_yaml_overrides_defaults(tmp_path):
    path = tmp_path / "feed.yaml"
    path.write_text(
        "timetable_feed:\n  url: https://mirror.example/find\n  timeout_seconds: 3\n",
        encoding="utf-8",
    )
    config = load_feed_config(str(path))
    assert config.url == "https://mirror.example/find"
    assert config.timeout_seconds == 3
    assert config.user_agent == DEFAULT_FEED["user_agent"]


def test_blank_url_falls_back_to_default(tmp_path):
    path = tmp_path / "feed.yaml"
    path.write_text("timetable_feed:\n  url: ''\n  referer: ''\n", encoding="utf-8")
    config = load_feed_config(str(path))
    assert config.url == DEFAULT_FEED["url"]
    assert config.referer == DEFAULT_FEED["referer"]
