"""Tests for settings file loading and the Settings mapping."""

import json

import pytest
import yaml

from zepress.config.loader import ConfigLoader, load_settings_from_file
from zepress.core.config import Settings
from zepress.core.exceptions import ConfigurationError


class TestConfigLoader:
    """Test loading YAML and JSON files."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "zepress.yaml"
        path.write_text(yaml.safe_dump({"settings": {"target": "wechat"}}), encoding="utf-8")
        assert ConfigLoader.load_config(path) == {"settings": {"target": "wechat"}}

    def test_load_json(self, tmp_path):
        path = tmp_path / "zepress.json"
        path.write_text(json.dumps({"plugins": {"Images": {"show_image_caption": False}}}), encoding="utf-8")
        assert ConfigLoader.load_config(path)["plugins"]["Images"] == {"show_image_caption": False}

    def test_type_override(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text("settings: {}\n", encoding="utf-8")
        assert ConfigLoader.load_config(path, config_type="yaml") == {"settings": {}}

    def test_empty_yaml_is_empty_mapping(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        assert ConfigLoader.load_config(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigLoader.load_config(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("x = 1", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Unsupported"):
            ConfigLoader.load_config(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.load_config(path)
        assert exc_info.value.cause is not None

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            ConfigLoader.load_config(path)

    def test_create_settings_extends_base(self):
        base = Settings(default_highlight="monokai")
        settings = ConfigLoader.create_settings({"settings": {"target": "wechat"}}, base_settings=base)
        assert settings.default_highlight == "monokai"
        assert settings.target == "wechat"

    def test_settings_section_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            ConfigLoader.create_settings({"settings": ["target"]})

    def test_plugin_configs(self):
        configs = ConfigLoader.plugin_configs({"plugins": {"Headings": {"enable_heading_number": True}, "Lists": None}})
        assert configs == {"Headings": {"enable_heading_number": True}, "Lists": {}}

    def test_load_settings_from_file(self, tmp_path):
        path = tmp_path / "zepress.yaml"
        path.write_text("settings:\n  defaultHighlight: nord\n  LinkFootnoteMode: all\n", encoding="utf-8")
        settings = load_settings_from_file(path)
        assert settings.default_highlight == "nord"
        assert settings.link_footnote_mode == "all"


class TestSettings:
    """Test the Settings value object."""

    def test_defaults(self):
        settings = Settings()
        assert settings.target == "preview"
        assert settings.enable_heading_number is None
        assert settings.requires_css_variable_resolution is False

    def test_wechat_target_requires_resolution(self):
        assert Settings(target="wechat").requires_css_variable_resolution is True
        assert Settings(enable_weixin_code_format=True).requires_css_variable_resolution is True

    def test_from_mapping_accepts_camel_case(self):
        settings = Settings.from_mapping(
            {"enableHeadingNumber": True, "showImageCaption": False, "enableWeixinCodeFormat": True}
        )
        assert settings.enable_heading_number is True
        assert settings.show_image_caption is False
        assert settings.enable_weixin_code_format is True

    def test_from_mapping_ignores_unknown_and_invalid_values(self):
        settings = Settings.from_mapping({"nope": 1, "link_footnote_mode": "sometimes", "embed_style": "inline"})
        assert settings.link_footnote_mode == Settings().link_footnote_mode
        assert settings.embed_style == Settings().embed_style

    def test_settings_are_frozen(self):
        with pytest.raises(AttributeError):
            Settings().target = "wechat"

    def test_to_dict_round_trips(self):
        settings = Settings(default_highlight="nord", theme_color="#000000")
        assert Settings.from_mapping(settings.to_dict()) == settings
