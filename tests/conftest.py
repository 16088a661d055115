"""
Pytest configuration for bffeval tests.
"""
import sys
import os

import pytest

# Make `import bffeval` work without installing, and let tests import the
# shared `builders` helpers.
_TESTS_DIR = os.path.abspath(os.path.dirname(__file__))
_SRC_DIR = os.path.join(os.path.dirname(_TESTS_DIR), 'src')

for _p in (_TESTS_DIR, _SRC_DIR):
	if _p not in sys.path:
		sys.path.insert(0, _p)


@pytest.fixture(autouse=True)
def _default_config():
	"""Every test starts from the default configuration."""
	from bffeval.config import config
	saved = config.as_dict()
	config.reset()
	yield config
	for key, value in saved.items():
		config.set(key, value)
