import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_DATA_DIR = Path.home() / ".prtracker"

DEFAULT_CONFIG: dict = {
    "store_path": str(DEFAULT_DATA_DIR / "prtracker.db"),
    "credentials_path": str(DEFAULT_DATA_DIR / "credentials.yml"),
    "github_api_url": "https://api.github.com",
    "github_timeout": 15,
    "default_project": None,  # project name used by `prtracker add` when --project is omitted
}


def load_config(config_path: str = ".prtracker.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prtracker.yml in the current directory
      3. CLI argument overrides
      4. PRTRACKER_DB for the store path
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a YAML mapping, got {type(file_config).__name__}.")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    if os.environ.get("PRTRACKER_DB"):
        config["store_path"] = os.environ["PRTRACKER_DB"]

    for key in ("store_path", "credentials_path"):
        config[key] = str(Path(config[key]).expanduser())
    config["github_timeout"] = int(config["github_timeout"])

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
