# src/bffeval/evaluator/operators.py
"""In-place ``+`` and ``-`` on runtime values.

Both functions may mutate ``existing`` (arrays and structs) and always
return the resulting value, which callers must store back.
"""

from ..errors import EvaluationError
from ..object import Array, Boolean, Integer, String, Struct, type_name, type_name_a


def in_place_add(existing, summand, range):
    if isinstance(existing, Array):
        if isinstance(summand, Array):
            existing.elements.extend(summand.elements)
        else:
            existing.elements.append(summand)
        return existing

    if isinstance(existing, Struct):
        if not isinstance(summand, Struct):
            raise EvaluationError(range, f"Cannot add {type_name_a(summand)} to a Struct. Can only add a Struct.")
        for name, member in summand.members.items():
            existing.members[name] = member
        return existing

    if isinstance(existing, String):
        if not isinstance(summand, String):
            raise EvaluationError(range, f"Cannot add {type_name_a(summand)} to a String. Can only add a String.")
        return String(existing.value + summand.value)

    if isinstance(existing, Integer):
        if not isinstance(summand, Integer):
            raise EvaluationError(range, f"Cannot add {type_name_a(summand)} to an Integer. Can only add an Integer.")
        return Integer(existing.value + summand.value)

    if isinstance(existing, Boolean):
        raise EvaluationError(range, "Cannot add to a Boolean.")

    raise EvaluationError(range, f"Cannot add {type_name_a(summand)} to {type_name_a(existing)}.")


def in_place_subtract(existing, to_subtract, range):
    if isinstance(existing, Array):
        if not existing.elements:
            return existing
        first = existing.elements[0]
        if not isinstance(first, String):
            raise EvaluationError(range, f"Cannot subtract from an Array of {type_name(first)}s. Can only subtract from an Array if it is an Array of Strings.")
        if not isinstance(to_subtract, String):
            raise EvaluationError(range, f"Cannot subtract {type_name_a(to_subtract)} from an Array of Strings. Can only subtract a String.")
        existing.elements[:] = [el for el in existing.elements if el != to_subtract]
        return existing

    if isinstance(existing, Struct):
        raise EvaluationError(range, "Cannot subtract from a Struct.")

    if isinstance(existing, String):
        if not isinstance(to_subtract, String):
            raise EvaluationError(range, f"Cannot subtract {type_name_a(to_subtract)} from a String. Can only subtract a String.")
        # Literal substring removal, not a pattern.
        return String(existing.value.replace(to_subtract.value, ''))

    if isinstance(existing, Integer):
        if not isinstance(to_subtract, Integer):
            raise EvaluationError(range, f"Cannot subtract {type_name_a(to_subtract)} from an Integer. Can only subtract an Integer.")
        return Integer(existing.value - to_subtract.value)

    if isinstance(existing, Boolean):
        raise EvaluationError(range, "Cannot subtract from a Boolean.")

    raise EvaluationError(range, f"Cannot subtract {type_name_a(to_subtract)} from {type_name_a(existing)}.")


OPERATORS = {
    '+': in_place_add,
    '-': in_place_subtract,
}
