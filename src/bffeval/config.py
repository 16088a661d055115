# src/bffeval/config.py
"""Evaluator configuration.

Defaults can be overridden from a persistent JSON file
(``~/.bffeval/config.json``) and then from environment variables:

- ``BFFEVAL_DEBUG``      enable evaluator debug logs (1/true/yes/on)
- ``BFFEVAL_LOG_LEVEL``  minimum level for ``should_log`` (debug/info/warning/error)
- ``BFFEVAL_PLATFORM``   force the platform define symbol (e.g. ``__LINUX__``)

Other options (``max_include_depth``, the built-in version values) are
only read from the file.
"""

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".bffeval" / "config.json"

_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}

_DEFAULTS = {
    'enable_debug_logs': False,
    'log_level': 'info',
    'platform_symbol': None,
    'fastbuild_version_string': 'vPlaceholderFastBuildVersionString',
    'fastbuild_version': -1,
    'env_var_placeholder': 'placeholder-{symbol}-value',
    'max_include_depth': 128,
}


def _parse_bool(raw):
    return str(raw).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    def __init__(self, **overrides):
        self.reset()
        for key, value in overrides.items():
            self.set(key, value)

    def reset(self):
        for key, value in _DEFAULTS.items():
            setattr(self, key, value)

    def set(self, key, value):
        if key not in _DEFAULTS:
            raise KeyError(f"Unknown config option: {key}")
        setattr(self, key, value)

    def as_dict(self):
        return {key: getattr(self, key) for key in _DEFAULTS}

    def load(self, path=DEFAULT_CONFIG_PATH):
        """Apply options from a JSON file. Missing files are ignored."""
        path = Path(path)
        if not path.is_file():
            return self
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable config file %s: %s", path, e)
            return self
        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: expected a JSON object", path)
            return self
        for key, value in data.items():
            if key in _DEFAULTS:
                setattr(self, key, value)
            else:
                logger.warning("Ignoring unknown config option %r in %s", key, path)
        return self

    def load_env(self, environ=None):
        environ = os.environ if environ is None else environ
        if 'BFFEVAL_DEBUG' in environ:
            self.enable_debug_logs = _parse_bool(environ['BFFEVAL_DEBUG'])
        if environ.get('BFFEVAL_LOG_LEVEL'):
            self.log_level = environ['BFFEVAL_LOG_LEVEL'].strip().lower()
        if environ.get('BFFEVAL_PLATFORM'):
            self.platform_symbol = environ['BFFEVAL_PLATFORM'].strip()
        return self

    def should_log(self, level='debug'):
        if level == 'debug' and not self.enable_debug_logs:
            return False
        threshold = logging.DEBUG if self.enable_debug_logs else _LEVELS.get(self.log_level, logging.INFO)
        return _LEVELS.get(level, logging.DEBUG) >= threshold


config = Config().load().load_env()
