import json
from pathlib import Path

from core import settings
from storage.config import AppConfig, load_config, save_config, update_config


def test_linux_data_dir_with_xdg():
    env = {"XDG_DATA_HOME": "/tmp/xdg"}
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="linux",
        env=env,
        home=Path("/home/test"),
    )
    assert result == Path("/tmp/xdg") / settings.APP_NAME


def test_linux_data_dir_default_home():
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="linux",
        env={},
        home=Path("/home/test"),
    )
    assert result == Path("/home/test/.local/share") / settings.APP_NAME


def test_macos_data_dir():
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="darwin",
        env={},
        home=Path("/Users/test"),
    )
    expected = Path("/Users/test/Library/Application Support") / settings.APP_NAME
    assert result == expected


def test_windows_data_dir_appdata():
    env = {"APPDATA": "C:/Users/test/AppData/Roaming"}
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="win32",
        env=env,
        home=Path("C:/Users/test"),
    )
    expected = Path(env["APPDATA"]) / settings.APP_NAME
    assert result == expected


def test_runtime_paths_inside_data_dir():
    assert settings.DB_PATH.parent == settings.DATA_DIR
    assert settings.CONFIG_PATH.parent == settings.DATA_DIR
    assert settings.LOG_PATH.parent == settings.LOG_DIR
    assert settings.LOG_DIR.parent == settings.DATA_DIR


def test_inference_default_ranges():
    assert settings.INFERENCE.min_random_days == 1
    assert settings.INFERENCE.max_random_days == 7
    assert settings.INFERENCE.max_tags == 3


def test_config_roundtrip_and_update(tmp_path):
    path = tmp_path / "config.json"
    assert load_config(path) == AppConfig()

    save_config(AppConfig(api_base_url="http://planner.test", user_email="sam@uni.edu"), path)
    cfg = update_config(path, default_view="today", unknown="ignored")

    assert cfg.api_base_url == "http://planner.test"
    assert cfg.default_view == "today"
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["user_email"] == "sam@uni.edu"
    assert "unknown" not in stored
    assert not path.with_suffix(".tmp").exists()


def test_config_ignores_corrupt_file_and_bad_view(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_config(path) == AppConfig()

    path.write_text(json.dumps({"default_view": "calendar"}), encoding="utf-8")
    assert load_config(path).default_view == "inbox"
