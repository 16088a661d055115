# src/bffeval/object.py
"""Runtime values of the .bff language.

The set of value kinds is closed: Boolean, Integer, String, Array, Struct.
Every consumer either handles all five or rejects the value with a typed
error.
"""

from .errors import InternalEvaluationError


class Object:
    def inspect(self):
        raise NotImplementedError("Subclasses must implement this method")

    def type(self):
        raise NotImplementedError("Subclasses must implement this method")

    def copy(self):
        return self

    def __repr__(self):
        return f"{self.type()}({self.inspect()})"


class Boolean(Object):
    def __init__(self, value): self.value = bool(value)
    def inspect(self): return "true" if self.value else "false"
    def type(self): return "Boolean"
    def __eq__(self, other): return isinstance(other, Boolean) and self.value == other.value
    def __hash__(self): return hash((Boolean, self.value))

class Integer(Object):
    def __init__(self, value): self.value = int(value)
    def inspect(self): return str(self.value)
    def type(self): return "Integer"
    def __eq__(self, other): return isinstance(other, Integer) and self.value == other.value
    def __hash__(self): return hash((Integer, self.value))

class String(Object):
    def __init__(self, value): self.value = value
    def inspect(self): return self.value
    def type(self): return "String"
    def __str__(self): return self.value
    def __eq__(self, other): return isinstance(other, String) and self.value == other.value
    def __hash__(self): return hash((String, self.value))

class Array(Object):
    def __init__(self, elements=None): self.elements = elements if elements is not None else []

    def inspect(self):
        elements_str = ", ".join(_literal(el) for el in self.elements)
        return "{" + elements_str + "}"

    def type(self): return "Array"

    def copy(self):
        return Array([el.copy() for el in self.elements])

    def __eq__(self, other):
        return isinstance(other, Array) and self.elements == other.elements

    def __len__(self):
        return len(self.elements)

    def __iter__(self):
        return iter(self.elements)


class StructMember:
    """A struct member's value and the definition that introduced it."""

    def __init__(self, value, definition):
        self.value = value
        self.definition = definition

    def __eq__(self, other):
        return isinstance(other, StructMember) and self.value == other.value

    def __repr__(self):
        return f"StructMember(value={self.value!r}, definition={self.definition!r})"


class Struct(Object):
    def __init__(self, members=None):
        self.members = members if members is not None else {}  # dict of name -> StructMember

    def inspect(self):
        pairs = [f".{name} = {_literal(member.value)}" for name, member in self.members.items()]
        return "[" + ", ".join(pairs) + "]"

    def type(self): return "Struct"

    def copy(self):
        return Struct({
            name: StructMember(member.value.copy(), member.definition)
            for name, member in self.members.items()
        })

    def get(self, name):
        member = self.members.get(name)
        return None if member is None else member.value

    def __eq__(self, other):
        return isinstance(other, Struct) and self.members == other.members


_ARTICLES = {
    "Boolean": "a Boolean",
    "Integer": "an Integer",
    "String": "a String",
    "Array": "an Array",
    "Struct": "a Struct",
}


def _literal(value):
    if isinstance(value, String):
        return f"'{value.value}'"
    return value.inspect()


def type_name(value):
    """One of Boolean/Integer/String/Array/Struct."""
    if isinstance(value, (Boolean, Integer, String, Array, Struct)):
        return value.type()
    raise InternalEvaluationError(None, f"Unhandled Value type: {value!r}")


def type_name_a(value):
    """Like ``type_name`` but prefixed with "a " or "an "."""
    return _ARTICLES[type_name(value)]


def deep_copy_value(value):
    type_name(value)
    return value.copy()


def to_python(value):
    """Convert a runtime value to plain Python data (structs become dicts)."""
    if isinstance(value, (Boolean, Integer, String)):
        return value.value
    if isinstance(value, Array):
        return [to_python(el) for el in value.elements]
    if isinstance(value, Struct):
        return {name: to_python(member.value) for name, member in value.members.items()}
    raise InternalEvaluationError(None, f"Unhandled Value type: {value!r}")


def from_python(obj, definition=None):
    """Convert plain Python data to a runtime value.

    Struct members built this way all share ``definition``.
    """
    if isinstance(obj, Object):
        return obj
    # bool first: bool is a subclass of int
    if isinstance(obj, bool):
        return Boolean(obj)
    if isinstance(obj, int):
        return Integer(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, (list, tuple)):
        return Array([from_python(el, definition) for el in obj])
    if isinstance(obj, dict):
        return Struct({
            str(name): StructMember(from_python(v, definition), definition)
            for name, v in obj.items()
        })
    raise TypeError(f"Cannot convert {type(obj).__name__} to a value")
