import logging
import yaml

from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def load_config(config_path: str = 'cfg/config.yaml', section: str = 'sqlwrapper') -> dict[str, Any]:
   """
   Load the sqlwrapper configuration from a YAML file.

   Args:
      config_path: Path to the YAML file.
      section: Top-level key holding the aspects.

   Returns:
      Mapping of aspect name -> mapping of option -> value.
   """
   try:
      config_file = Path(config_path)
      if not config_file.exists():
         raise FileNotFoundError(f"config file not found at: {config_path}")
      with open(config_file, 'r', encoding='utf-8') as f:
         config = yaml.safe_load(f)

      if config and section in config:
         return config[section] or {}
      raise KeyError(f"Section '{section}' not found in {config_path}")

   except Exception as e:
      raise RuntimeError(f"Failed to load {config_path}: {e}")


def close_quietly(resource, description: str = "resource") -> None:
   """Close a driver resource, logging (never raising) any failure."""
   if resource is None:
      return
   try:
      resource.close()
   except Exception as e:
      logger.debug("Closing %s failed (ignored): %s", description, e)
