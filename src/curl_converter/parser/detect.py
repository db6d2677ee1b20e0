"""Auto-detect conversion input format."""

from pathlib import Path

import yaml

REQUEST_FILE_KEYS = ("request", "requests", "collection")


def detect_format(file_path: Path) -> str:
    """Detect whether a file is a YAML request file or a shell script.

    Returns: 'yaml' or 'script'.
    """
    text = file_path.read_text(encoding="utf-8")

    try:
        data = yaml.safe_load(text)
        if isinstance(data, dict) and any(key in data for key in REQUEST_FILE_KEYS):
            return "yaml"
    except yaml.YAMLError:
        pass

    return "script"
