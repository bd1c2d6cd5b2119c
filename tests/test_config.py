"""Tests for config persistence and the review settings source."""

from __future__ import annotations

import json

import pytest

from immich_swipe.config import (
    ReviewSettings,
    clear_credentials,
    get_config_path,
    load_config,
    normalize_server_url,
    save_config,
    set_credentials,
)
from immich_swipe.models import (
    REVIEW_ORDER_CHRONO_ASC,
    REVIEW_ORDER_CHRONO_DESC,
    REVIEW_ORDER_RANDOM,
    UserConfig,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://photos.example.com", "https://photos.example.com"),
        ("https://photos.example.com/", "https://photos.example.com"),
        ("https://photos.example.com/api", "https://photos.example.com"),
        ("https://photos.example.com/api/", "https://photos.example.com"),
        ("  http://10.0.0.2:2283//  ", "http://10.0.0.2:2283"),
    ],
)
def test_normalize_server_url(raw, expected) -> None:
    assert normalize_server_url(raw) == expected


class TestConfigPersistence:
    def test_missing_file_returns_defaults(self, config_dir) -> None:
        config = load_config()
        assert config == UserConfig()
        assert not config.config_defaulted

    def test_save_then_load(self, config_dir) -> None:
        config = UserConfig(
            server_url="https://photos.example.com",
            api_key="k",
            review_order=REVIEW_ORDER_CHRONO_DESC,
            skip_videos=True,
            dark_mode=False,
            last_used_album_id="al1",
        )
        assert save_config(config) is True
        assert get_config_path() == config_dir / "config.json"
        assert load_config() == config

    def test_save_leaves_no_temp_files(self, config_dir) -> None:
        save_config(UserConfig(api_key="k"))
        assert [p.name for p in config_dir.iterdir()] == ["config.json"]

    def test_invalid_json_is_backed_up(self, config_dir) -> None:
        path = config_dir / "config.json"
        path.write_text("{not json", encoding="utf-8")

        config = load_config()

        assert config.config_defaulted
        assert not path.exists()
        assert (config_dir / "config.json.corrupt").read_text(encoding="utf-8") == "{not json"

    def test_non_object_root_is_backed_up(self, config_dir) -> None:
        (config_dir / "config.json").write_text("[1, 2]", encoding="utf-8")
        assert load_config().config_defaulted

    def test_mistyped_fields_fall_back_individually(self, config_dir) -> None:
        (config_dir / "config.json").write_text(
            json.dumps(
                {
                    "server_url": "https://photos.example.com/api/",
                    "api_key": 42,
                    "review_order": "sideways",
                    "skip_videos": "yes",
                    "dark_mode": False,
                }
            ),
            encoding="utf-8",
        )

        config = load_config()

        assert config.server_url == "https://photos.example.com"
        assert config.api_key == ""
        assert config.review_order == REVIEW_ORDER_RANDOM
        assert config.skip_videos is False
        assert config.dark_mode is False


def test_credentials_helpers() -> None:
    config = UserConfig()
    set_credentials(config, "https://photos.example.com/api", "  key  ")
    assert (config.server_url, config.api_key) == ("https://photos.example.com", "key")
    assert config.is_logged_in
    clear_credentials(config)
    assert not config.is_logged_in


def test_unknown_review_order_clamped_on_construction() -> None:
    assert UserConfig(review_order="bogus").review_order == REVIEW_ORDER_RANDOM


class TestReviewSettings:
    def test_change_persists_then_notifies(self, make_settings) -> None:
        settings = make_settings()
        seen: list[tuple[str, int]] = []
        settings.subscribe(lambda: seen.append((settings.review_order, len(settings.saved))))

        settings.set_review_order(REVIEW_ORDER_CHRONO_ASC)

        assert seen == [(REVIEW_ORDER_CHRONO_ASC, 1)]
        assert settings.is_chronological

    def test_same_value_is_a_no_op(self, make_settings) -> None:
        settings = make_settings(skip_videos=True)
        calls: list[None] = []
        settings.subscribe(lambda: calls.append(None))

        settings.set_skip_videos(True)
        settings.set_review_order(REVIEW_ORDER_RANDOM)

        assert calls == []
        assert settings.saved == []

    def test_unknown_order_rejected(self, make_settings) -> None:
        with pytest.raises(ValueError, match="Unknown review order"):
            make_settings().set_review_order("shuffle")

    def test_cycle_review_order_wraps(self, make_settings) -> None:
        settings = make_settings()
        assert settings.cycle_review_order() == REVIEW_ORDER_CHRONO_ASC
        assert settings.cycle_review_order() == REVIEW_ORDER_CHRONO_DESC
        assert settings.cycle_review_order() == REVIEW_ORDER_RANDOM

    def test_toggle_skip_videos(self, make_settings) -> None:
        settings = make_settings()
        assert settings.toggle_skip_videos() is True
        assert settings.toggle_skip_videos() is False

    def test_unsubscribe(self, make_settings) -> None:
        settings = make_settings()
        calls: list[None] = []
        unsubscribe = settings.subscribe(lambda: calls.append(None))
        unsubscribe()
        settings.toggle_skip_videos()
        assert calls == []

    def test_last_used_album_saves_without_notifying(self, make_settings) -> None:
        settings = make_settings()
        calls: list[None] = []
        settings.subscribe(lambda: calls.append(None))

        settings.set_last_used_album("al1")

        assert settings.last_used_album_id == "al1"
        assert len(settings.saved) == 1
        assert calls == []

    def test_failed_save_still_announces(self) -> None:
        settings = ReviewSettings(UserConfig(), save=lambda _c: False)
        calls: list[None] = []
        settings.subscribe(lambda: calls.append(None))
        settings.toggle_skip_videos()
        assert calls == [None]
