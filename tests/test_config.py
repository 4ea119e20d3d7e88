"""Tests for configuration management."""

import json

import pytest

from visio_annotate.core.config import (
    AppConfig,
    ConfigManager,
    WorkspaceSettings,
    WorkspaceSettingsManager,
)


class TestWorkspaceSettings:
    """Tests for WorkspaceSettings."""

    def test_default_settings(self):
        settings = WorkspaceSettings()

        assert settings.show_annotation_labels is True
        assert settings.export_scale == 1.0

    def test_to_dict(self):
        data = WorkspaceSettings(show_annotation_labels=False, export_scale=0.5).to_dict()

        assert data == {"showAnnotationLabels": False, "exportScale": 0.5}

    def test_from_dict_with_defaults(self):
        settings = WorkspaceSettings.from_dict({"showAnnotationLabels": False})

        assert settings.show_annotation_labels is False
        assert settings.export_scale == 1.0

    @pytest.mark.parametrize("value", [0, -2, "big", True, None])
    def test_from_dict_invalid_scale(self, value):
        assert WorkspaceSettings.from_dict({"exportScale": value}).export_scale == 1.0

    def test_update(self):
        settings = WorkspaceSettings()

        assert settings.update(export_scale=2, show_annotation_labels=False) is True
        assert settings.export_scale == 2.0
        assert isinstance(settings.export_scale, float)
        assert settings.show_annotation_labels is False

    @pytest.mark.parametrize("value", ["2", 0, -0.5, float("inf"), None, False])
    def test_update_invalid_scale(self, value):
        settings = WorkspaceSettings()

        assert settings.update(export_scale=value) is False
        assert settings.export_scale == 1.0

    def test_update_non_boolean_labels_flag(self):
        settings = WorkspaceSettings()

        assert settings.update(show_annotation_labels="no") is False
        assert settings.show_annotation_labels is True

    def test_update_unknown_names(self):
        settings = WorkspaceSettings()

        assert settings.update(to_dict=1, from_dict=None, missing=3) is False
        assert settings.to_dict() == {"showAnnotationLabels": True, "exportScale": 1.0}

    def test_update_keeps_valid_values_next_to_invalid_ones(self):
        settings = WorkspaceSettings()

        assert settings.update(export_scale=-1, show_annotation_labels=False) is True
        assert settings.export_scale == 1.0
        assert settings.show_annotation_labels is False


class TestWorkspaceSettingsManager:
    """Tests for WorkspaceSettingsManager."""

    def test_load_missing_file(self, tmp_path):
        settings = WorkspaceSettingsManager(tmp_path).load()

        assert settings == WorkspaceSettings()

    def test_save_creates_folder(self, tmp_path):
        manager = WorkspaceSettingsManager(tmp_path)

        result = manager.save(WorkspaceSettings(export_scale=0.25))

        assert result is True
        path = tmp_path / ".visioannotate" / "workspace.json"
        assert path.exists()
        assert json.loads(path.read_text())["exportScale"] == 0.25
        assert "\n  " in path.read_text()

    def test_save_and_load(self, tmp_path):
        WorkspaceSettingsManager(tmp_path).save(
            WorkspaceSettings(show_annotation_labels=False, export_scale=2.0)
        )

        settings = WorkspaceSettingsManager(tmp_path).load()

        assert settings.show_annotation_labels is False
        assert settings.export_scale == 2.0

    def test_load_invalid_json(self, tmp_path):
        settings_dir = tmp_path / ".visioannotate"
        settings_dir.mkdir()
        (settings_dir / "workspace.json").write_text("{broken")

        assert WorkspaceSettingsManager(tmp_path).load() == WorkspaceSettings()

    def test_load_unreadable_file(self, tmp_path):
        """A directory where the file should be is treated as unreadable."""
        (tmp_path / ".visioannotate" / "workspace.json").mkdir(parents=True)

        assert WorkspaceSettingsManager(tmp_path).load() == WorkspaceSettings()

    def test_save_failure(self, tmp_path):
        (tmp_path / ".visioannotate").write_text("a file, not a folder")

        assert WorkspaceSettingsManager(tmp_path).save(WorkspaceSettings()) is False


class TestAppConfig:
    """Tests for AppConfig."""

    def test_default_config(self):
        config = AppConfig()

        assert config.drag_from_centre is True
        assert config.show_images_in_sidebar is True
        assert config.max_recent_folders == 10
        assert config.recent_folders == []

    def test_from_dict(self):
        config = AppConfig.from_dict({
            "dragFromCentre": False,
            "recentFolders": ["/a", "/b"],
        })

        assert config.drag_from_centre is False
        assert config.show_images_in_sidebar is True
        assert config.recent_folders == ["/a", "/b"]


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_load_missing_file(self, tmp_path):
        manager = ConfigManager(tmp_path / "config.yaml")

        assert manager.config.max_recent_folders == 10

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "config.yaml"
        ConfigManager(path).save(AppConfig(drag_from_centre=False))

        assert ConfigManager(path).config.drag_from_centre is False

    def test_save_without_config(self, tmp_path):
        assert ConfigManager(tmp_path / "config.yaml").save() is False

    def test_load_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("key: [unclosed")

        assert ConfigManager(path).load() == AppConfig()

    def test_update(self, tmp_path):
        path = tmp_path / "config.yaml"
        manager = ConfigManager(path)

        manager.update(show_images_in_sidebar=False, unknown_key=1)

        assert ConfigManager(path).config.show_images_in_sidebar is False

    def test_add_recent_folder(self, tmp_path):
        manager = ConfigManager(tmp_path / "config.yaml")
        manager.config.max_recent_folders = 2
        first, second, third = ((tmp_path / n).resolve() for n in ("one", "two", "three"))

        manager.add_recent_folder(first)
        manager.add_recent_folder(second)
        manager.add_recent_folder(first)
        assert manager.config.recent_folders == [str(first), str(second)]

        manager.add_recent_folder(third)
        assert manager.config.recent_folders == [str(third), str(first)]

    def test_add_recent_folder_disabled(self, tmp_path):
        manager = ConfigManager(tmp_path / "config.yaml")
        manager.config.max_recent_folders = 0

        manager.add_recent_folder(tmp_path)

        assert manager.config.recent_folders == []
