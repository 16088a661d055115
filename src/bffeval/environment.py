# src/bffeval/environment.py
"""Lexical scopes for one evaluation pass."""

from contextlib import contextmanager

from .errors import EvaluationError, InternalEvaluationError
from .object import Struct
from .provenance import VariableDefinition

CURRENT = 'current'
PARENT = 'parent'


class ScopeVariable:
    """A binding: its value, its definition identity and, for bindings made
    by ``Using``, the range of the ``Using`` statement."""

    def __init__(self, value, definition, using_range=None):
        self.value = value
        self.definition = definition
        self.using_range = using_range

    @property
    def member_definitions(self):
        """Struct member name -> definition, or None when the value is not a Struct."""
        if not isinstance(self.value, Struct):
            return None
        return {name: member.definition for name, member in self.value.members.items()}

    def __repr__(self):
        return f"ScopeVariable(value={self.value!r}, definition={self.definition.id})"


class Scope:
    def __init__(self):
        self.store = {}  # insertion-ordered: name -> ScopeVariable

    def __contains__(self, name):
        return name in self.store

    def __iter__(self):
        return iter(self.store)

    def __len__(self):
        return len(self.store)

    def get(self, name, default=None):
        return self.store.get(name, default)

    def items(self):
        return self.store.items()


class ScopeStack:
    """Stack of scopes; index 0 is the root scope, the last one is current.

    "Parent" always means exactly one level below the current scope, never a
    search up the chain.
    """

    def __init__(self):
        self.stack = []
        self._next_definition_id = 1
        self.push()

    # ---- Stack discipline --------------------------------------------------------

    def push(self):
        scope = Scope()
        self.stack.append(scope)
        return scope

    def pop(self):
        if len(self.stack) <= 1:
            raise InternalEvaluationError(None, "Cannot pop the root scope.")
        return self.stack.pop()

    @contextmanager
    def scope(self):
        """Push a scope for the duration of the ``with`` block."""
        scope = self.push()
        try:
            yield scope
        finally:
            self.pop()

    @property
    def current(self):
        return self.stack[-1]

    @property
    def depth(self):
        return len(self.stack)

    # ---- Definitions -------------------------------------------------------------

    def create_definition(self, range, name=""):
        definition = VariableDefinition(self._next_definition_id, range, name)
        self._next_definition_id += 1
        return definition

    # ---- Lookup ------------------------------------------------------------------

    def find(self, name):
        """Search from the current scope to the root. None if absent."""
        for scope in reversed(self.stack):
            variable = scope.get(name)
            if variable is not None:
                return variable
        return None

    def find_current(self, name):
        return self.current.get(name)

    def find_parent(self, name):
        if len(self.stack) < 2:
            return None
        return self.stack[-2].get(name)

    def lookup(self, name, range):
        variable = self.find(name)
        if variable is None:
            raise EvaluationError(range, f'Referencing variable "{name}" that is not defined in the current scope or any of the parent scopes.')
        return variable

    def lookup_current(self, name, range):
        variable = self.find_current(name)
        if variable is None:
            raise EvaluationError(range, f'Referencing variable "{name}" that is not defined in the current scope.')
        return variable

    def lookup_parent(self, name, range):
        self._require_parent(range)
        variable = self.find_parent(name)
        if variable is None:
            raise EvaluationError(range, f'Referencing variable "{name}" in the parent scope that is not defined in the parent scope.')
        return variable

    def lookup_from_parent(self, name, range):
        """Search from the parent scope to the root (reads of ``^Name``)."""
        self._require_parent(range)
        for scope in reversed(self.stack[:-1]):
            variable = scope.get(name)
            if variable is not None:
                return variable
        raise EvaluationError(range, f'Referencing variable "{name}" in a parent scope that is not defined in any parent scope.')

    def lookup_in(self, scope_location, name, range):
        """Current-scope-only or parent-scope-only lookup."""
        if scope_location == CURRENT:
            return self.lookup_current(name, range)
        if scope_location == PARENT:
            return self.lookup_parent(name, range)
        raise InternalEvaluationError(range, f"Unknown scope location '{scope_location}'")

    # ---- Writes ------------------------------------------------------------------

    def set_current(self, name, value, range):
        """Create or update ``name`` in the current scope.

        Returns ``(variable, created)``. A new definition identity is only
        allocated when the binding is created.
        """
        variable = self.current.get(name)
        if variable is not None:
            variable.value = value
            return variable, False
        variable = ScopeVariable(value, self.create_definition(range, name))
        self.current.store[name] = variable
        return variable, True

    def define_current(self, name, value, definition, using_range=None):
        """Bind ``name`` in the current scope to an existing definition identity."""
        variable = ScopeVariable(value, definition, using_range)
        self.current.store[name] = variable
        return variable

    def update_current(self, name, value, range):
        variable = self.find_current(name)
        if variable is None:
            raise EvaluationError(range, f'Cannot update variable "{name}" in the current scope because the variable does not exist in the current scope.')
        variable.value = value
        return variable

    def update_parent(self, name, value, range):
        self._require_parent(range)
        variable = self.find_parent(name)
        if variable is None:
            raise EvaluationError(range, f'Cannot update variable "{name}" in parent scope because the variable does not exist in the parent scope.')
        variable.value = value
        return variable

    def _require_parent(self, range):
        if len(self.stack) < 2:
            raise EvaluationError(range, "Cannot access parent scope because there is no parent scope.")
