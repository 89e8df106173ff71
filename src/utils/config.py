"""Configuration loader.

Reads YAML configuration files into plain dictionaries.  Configuration
files normally live in the `configs/` directory at the project root;
see `configs/projection.yaml` for the projection settings.
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .logging import get_logger

logger = get_logger(__name__)


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML configuration file into a dictionary.

    Parameters
    ----------
    path : str or Path
        Path to the YAML configuration file.

    Returns
    -------
    dict
        Parsed configuration dictionary.  Returns an empty dict if the
        file does not exist or is empty.

    Raises
    ------
    ValueError
        If the top level of the document is not a mapping.
    yaml.YAMLError
        If the file is not valid YAML.
    """
    cfg_path = Path(path)
    if not cfg_path.is_file():
        logger.warning("Config file %s not found, using defaults", cfg_path)
        return {}
    with open(cfg_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{cfg_path}: expected a mapping at the top level, got {type(data).__name__}")
    return data
