import os
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def resolve_storage_root(configured: str, module_dir: str = "image-back-server", cwd: Optional[str] = None) -> Path:
    """Turn the configured upload directory into an absolute storage root.

    Absolute values are returned as-is. Relative values are looked up in the
    working directory first and then under ``module_dir``; whichever already
    exists wins, otherwise the working-directory candidate is used and is
    created on first write.
    """
    configured_path = Path(os.path.normpath(configured))
    if configured_path.is_absolute():
        return configured_path

    base = Path(cwd) if cwd else Path.cwd()
    working_dir_candidate = Path(os.path.normpath(base.absolute() / configured_path))
    module_dir_candidate = Path(os.path.normpath(base.absolute() / module_dir / configured_path))

    if working_dir_candidate.exists():
        return working_dir_candidate
    if module_dir_candidate.exists():
        return module_dir_candidate
    logger.info(f"No existing upload directory found for '{configured}', defaulting to {working_dir_candidate}")
    return working_dir_candidate
