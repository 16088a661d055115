# src/bffeval/__init__.py
"""Evaluator for FASTBuild .bff parse trees."""

from .bff_ast import ParseData, ParseError, load_parse_data
from .errors import DataAndMaybeError, EvaluationError, InternalEvaluationError
from .evaluator import Evaluator, evaluate
from .provenance import (
    EvaluatedData, EvaluatedVariable, SourceRange, VariableDefinition, VariableReference,
)

__version__ = '0.1.0'

__all__ = [
    'DataAndMaybeError', 'EvaluatedData', 'EvaluatedVariable', 'EvaluationError',
    'Evaluator', 'InternalEvaluationError', 'ParseData', 'ParseError', 'SourceRange',
    'VariableDefinition', 'VariableReference', 'evaluate', 'load_parse_data',
]
