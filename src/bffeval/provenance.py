# src/bffeval/provenance.py
"""Provenance records produced by one evaluation pass.

Every evaluated value and every variable access is tied to a ``SourceRange``
(resource URI plus start/end position) and, for accesses, to the
``VariableDefinition`` identity it resolved to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .bff_ast import ParseSourceRange, SourcePosition


@dataclass(frozen=True)
class SourceRange:
    uri: str
    start: SourcePosition
    end: SourcePosition

    @classmethod
    def from_parse_range(cls, uri: str, parse_range: ParseSourceRange) -> "SourceRange":
        return cls(uri, parse_range.start, parse_range.end)

    @classmethod
    def from_positions(cls, uri: str, start: SourcePosition, end: SourcePosition) -> "SourceRange":
        return cls(uri, start, end)

    @classmethod
    def create(cls, uri: str, start_line: int, start_character: int,
               end_line: int, end_character: int) -> "SourceRange":
        return cls(uri, SourcePosition(start_line, start_character), SourcePosition(end_line, end_character))

    def contains(self, uri: str, position: SourcePosition) -> bool:
        """Start-inclusive, end-exclusive."""
        if uri != self.uri:
            return False
        point = (position.line, position.character)
        return (self.start.line, self.start.character) <= point < (self.end.line, self.end.character)

    def __str__(self):
        return f"{self.uri}:{self.start.line}:{self.start.character}-{self.end.line}:{self.end.character}"


@dataclass(frozen=True)
class VariableDefinition:
    """Identity of one binding. ``id`` is unique within an evaluation pass."""
    id: int
    range: SourceRange
    name: str = ""


@dataclass(frozen=True)
class VariableReference:
    definition: VariableDefinition
    range: SourceRange
    # Set when the referenced binding was brought into scope by ``Using``.
    using_range: Optional[SourceRange] = None


@dataclass
class EvaluatedVariable:
    value: Any
    range: SourceRange


@dataclass
class EvaluatedData:
    """The three append-only logs of an evaluation pass, in evaluation order."""
    evaluated_variables: List[EvaluatedVariable] = field(default_factory=list)
    variable_references: List[VariableReference] = field(default_factory=list)
    variable_definitions: List[VariableDefinition] = field(default_factory=list)

    # ---- Recording ---------------------------------------------------------------

    def add_evaluated_variable(self, value, range: SourceRange) -> None:
        self.evaluated_variables.append(EvaluatedVariable(value, range))

    def add_reference(self, definition: VariableDefinition, range: SourceRange,
                      using_range: Optional[SourceRange] = None) -> None:
        self.variable_references.append(VariableReference(definition, range, using_range))

    def add_definition(self, definition: VariableDefinition) -> None:
        self.variable_definitions.append(definition)

    # ---- Queries -----------------------------------------------------------------

    def get_definition(self, definition_id: int) -> Optional[VariableDefinition]:
        for definition in self.variable_definitions:
            if definition.id == definition_id:
                return definition
        return None

    def definitions_named(self, name: str) -> List[VariableDefinition]:
        return [d for d in self.variable_definitions if d.name == name]

    def references_to(self, definition: Union[VariableDefinition, int]) -> List[VariableReference]:
        definition_id = definition.id if isinstance(definition, VariableDefinition) else definition
        return [r for r in self.variable_references if r.definition.id == definition_id]

    def evaluated_variables_at(self, uri: str, position: SourcePosition) -> List[EvaluatedVariable]:
        return [v for v in self.evaluated_variables if v.range.contains(uri, position)]

    def references_at(self, uri: str, position: SourcePosition) -> List[VariableReference]:
        return [r for r in self.variable_references if r.range.contains(uri, position)]

    def summary(self) -> Dict[str, int]:
        return {
            'evaluated_variables': len(self.evaluated_variables),
            'variable_references': len(self.variable_references),
            'variable_definitions': len(self.variable_definitions),
        }
