# src/bffeval/evaluator/__init__.py
from .core import BUILTIN_DEFINITION, Evaluator, evaluate
from .utils import new_summary

__all__ = ['BUILTIN_DEFINITION', 'Evaluator', 'evaluate', 'new_summary']
