"""Test settings loading."""
import sys
import json
from pathlib import Path
import tempfile
import shutil

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pull_counter.main import DEFAULT_SETTINGS, load_settings, log_poll_interval, save_settings


def test_settings():
    """Test settings defaults, merging and saving."""
    temp_dir = Path(tempfile.mkdtemp())
    settings_path = temp_dir / "settings.json"
    try:
        settings = load_settings(settings_path)
        assert settings == DEFAULT_SETTINGS, "Missing file gives defaults"
        assert settings is not DEFAULT_SETTINGS
        print("[OK] Defaults without a settings file")

        settings_path.write_text(json.dumps({"parser_language": "de", "log_poll_interval_ms": 250}),
                                 encoding='utf-8')
        settings = load_settings(settings_path)
        assert settings['parser_language'] == "de"
        assert settings['queue_drain_interval_ms'] == 100, "Unset keys keep their defaults"
        print("[OK] Saved values merged over defaults")

        settings['timezone'] = "UTC"
        save_settings(settings_path, settings)
        assert load_settings(settings_path)['timezone'] == "UTC"
        print("[OK] Settings saved")

        settings_path.write_text("[1, 2]", encoding='utf-8')
        assert load_settings(settings_path) == DEFAULT_SETTINGS
        settings_path.write_text("{not json", encoding='utf-8')
        assert load_settings(settings_path) == DEFAULT_SETTINGS
        print("[OK] Bad settings file ignored")
    finally:
        shutil.rmtree(temp_dir)


def test_poll_intervals():
    """Log polling and queue draining are configured separately."""
    assert 'poll_interval_ms' not in DEFAULT_SETTINGS
    assert DEFAULT_SETTINGS['queue_drain_interval_ms'] == 100
    assert log_poll_interval(DEFAULT_SETTINGS) == 1.0
    assert log_poll_interval({'log_poll_interval_ms': 250}) == 0.25
    assert log_poll_interval({'log_poll_interval_ms': 0}) == 1.0, "Unset falls back to the default"
    assert log_poll_interval({'log_poll_interval_ms': 5}) == 0.05, "Polling is capped at 50 ms"
    assert log_poll_interval({'log_poll_interval_ms': "fast"}) == 1.0
    print("[OK] Log poll interval from settings")


if __name__ == "__main__":
    test_settings()
    test_poll_intervals()
