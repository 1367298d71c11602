"""Pytest configuration shared by every test.

The whole run uses a throwaway config directory, so neither the user's
~/.biceplab/config.toml nor their BICEPLAB_* variables reach a test.
Tests that need their own home directory use ``temp_home_dir``.
"""

import pytest

from biceplab.config_manager import ENV_OVERRIDES, ConfigManager


@pytest.fixture(scope="session", autouse=True)
def isolated_config_dir(tmp_path_factory):
    """Point ConfigManager's default location at a session temp directory."""
    config_dir = tmp_path_factory.mktemp("biceplab-config")
    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(ConfigManager, "DEFAULT_CONFIG_DIR", config_dir)
        mp.setattr(ConfigManager, "DEFAULT_CONFIG_FILE", config_dir / "config.toml")
        for env_var in ENV_OVERRIDES.values():
            mp.delenv(env_var, raising=False)
        yield config_dir
