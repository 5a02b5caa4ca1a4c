"""Site content file loading."""

import json
import logging
from pathlib import Path
from typing import Any

from blockstage.core.errors import ContentLoadError

logger = logging.getLogger(__name__)


def load_site_content(path: Path) -> dict[str, Any] | None:
    """Read the site configuration from a JSON content file.

    A missing file is not an error: the site simply has no content yet.

    Args:
        path: Path to the content file

    Returns:
        Site configuration mapping, or None if the file doesn't exist

    Raises:
        ContentLoadError: If the file can't be read or isn't a JSON object
    """
    if not path.exists():
        logger.info(f"Content file not found: {path}")
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ContentLoadError(f"Cannot read content file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ContentLoadError(f"Invalid JSON in content file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ContentLoadError(f"Content file {path} must contain a JSON object")
    return data
