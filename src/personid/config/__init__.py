"""Configuration loading utilities.

Precedence of configuration sources:
    1. Package defaults (``defaults.yml``)
    2. Optional user-provided YAML passed to :func:`load_config`, or the file
       named by the ``PERSONID_CONFIG`` environment variable when no path is
       passed
"""

from .schema import ConfigModel, default_config, load_config

__all__ = ["ConfigModel", "default_config", "load_config"]
