"""Tests for YAML settings parsing."""

import pytest

from cropwatch.config import DEFAULT_BOUNDARY, Settings, load_config, parse_config
from cropwatch.errors import ValidationError


class TestParseConfig:
    def test_defaults(self):
        settings = parse_config(None)
        assert settings == Settings()
        assert settings.series_days == 60
        assert settings.farm_count is None
        assert settings.default_officer == "System Officer"
        assert settings.boundary == list(DEFAULT_BOUNDARY)

    @pytest.mark.parametrize("content", ["", "just a string", "- a\n- b", "key: [unclosed"])
    def test_unusable_yaml_gives_defaults(self, content):
        assert parse_config(content) == Settings()

    def test_values(self):
        settings = parse_config(
            "farm_count: 50\n"
            "seed: 42\n"
            "noise_std: 0\n"
            "default_officer: Taluka Officer\n"
            "default_disaster_type: drought\n"
            "log_level: debug\n"
            "log_format: text\n"
        )
        assert settings.farm_count == 50
        assert settings.seed == 42
        assert settings.noise_std == 0.0
        assert isinstance(settings.noise_std, float)
        assert settings.default_officer == "Taluka Officer"
        assert settings.default_disaster_type == "drought"
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "text"

    def test_boundary(self):
        settings = parse_config("boundary: [[0, 0], [0, 1], [1, 1]]")
        assert settings.boundary == [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0)]

    def test_unknown_keys_ignored(self):
        assert parse_config("satellite: sentinel-2\nseries_days: 30").series_days == 30

    @pytest.mark.parametrize("content,field", [
        ("farm_count: many", "farm_count"),
        ("series_days: 10.5", "series_days"),
        ("seed: true", "seed"),
        ("default_officer: 12", "default_officer"),
        ("default_disaster_type: volcano", "default_disaster_type"),
        ("log_format: xml", "log_format"),
        ("log_level: LOUD", "log_level"),
        ("boundary: [[0, 0], [1, 1]]", "boundary"),
    ])
    def test_wrong_types_raise(self, content, field):
        with pytest.raises(ValidationError) as exc:
            parse_config(content)
        assert exc.value.field == field


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "absent.yml") == Settings()

    def test_reads_file(self, tmp_path):
        path = tmp_path / "cropwatch.yml"
        path.write_text("farm_count: 12\nseries_days: 45\n", encoding="utf-8")
        settings = load_config(str(path))
        assert settings.farm_count == 12
        assert settings.series_days == 45
