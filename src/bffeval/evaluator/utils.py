# src/bffeval/evaluator/utils.py
import logging

from ..config import config

logger = logging.getLogger("bffeval.evaluator")


def debug_log(message, data=None, level='debug'):
    """Conditional debug logging that respects the user's config."""
    if not config.should_log(level):
        return
    if data is not None:
        logger.log(logging.DEBUG if level == 'debug' else logging.INFO, "%s: %s", message, data)
    else:
        logger.log(logging.DEBUG if level == 'debug' else logging.INFO, "%s", message)


def new_summary():
    """Per-pass counters, logged when the pass finishes."""
    return {
        'evaluated_statements': 0,
        'includes': 0,
        'skipped_once_includes': 0,
        'max_scope_depth': 1,
        'errors': 0,
    }
