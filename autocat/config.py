"""
Configuration for autocat.

Every threshold and weight lives in autocat.toml; there are no defaults in
code, so a missing key fails loudly. A .env file may point
AUTOCAT_CONFIG_PATH at another TOML file and set APP_ENV.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

CONFIG_PATH = Path(
    os.environ.get("AUTOCAT_CONFIG_PATH", Path(__file__).resolve().parent.parent / "autocat.toml")
)


def _load(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise RuntimeError(f"Configuration file not found: {path}")
    with path.open("rb") as fh:
        return tomllib.load(fh)


_CONFIG = _load(CONFIG_PATH)


def get(*keys: str) -> Any:
    """Value at a nested key path, e.g. get("image", "weights", "hash").

    Raises:
        RuntimeError: any key along the path is missing
    """
    node: Any = _CONFIG
    for depth, key in enumerate(keys):
        if not isinstance(node, dict) or key not in node:
            raise RuntimeError(
                f"Missing config key '{'.'.join(keys[:depth + 1])}' in {CONFIG_PATH.name}"
            )
        node = node[key]
    return node
