"""Expression trees evaluated against rows: columns, constants, comparisons and logic."""

from __future__ import annotations

import abc
import enum

from minidb.types import CmpBool, Field, TypeId, cmp_bool


class ExpressionType(enum.IntEnum):
    LOGIC = 0
    COMPARISON = 1
    COLUMN = 2
    CONSTANT = 3


class LogicType(enum.Enum):
    AND = "and"
    OR = "or"


def logic_type_from(text):
    """Map the connector text "and" / "or" to a LogicType."""
    try:
        return LogicType(text)
    except ValueError:
        raise ValueError(f"unsupported logic type {text!r}") from None


class AbstractExpression(abc.ABC):
    """Base of all expressions; an expression is a tree of child expressions."""

    def __init__(self, children, return_type, expression_type):
        self.children = tuple(children)
        self.return_type = TypeId(return_type)
        self.expression_type = ExpressionType(expression_type)

    @abc.abstractmethod
    def evaluate(self, row):
        """Return the Field this expression yields for one row."""

    @abc.abstractmethod
    def evaluate_join(self, left_row, right_row):
        """Return the Field this expression yields for a pair of joined rows."""

    @property
    def col_idx(self):
        return 0

    @property
    def comparison_type(self):
        return ""


class ColumnValueExpression(AbstractExpression):
    """The value of one column; row_idx 0 is the left side of a join, 1 the right."""

    def __init__(self, row_idx, col_idx, return_type):
        super().__init__((), return_type, ExpressionType.COLUMN)
        self.row_idx = row_idx
        self._col_idx = col_idx

    @property
    def col_idx(self):
        return self._col_idx

    def evaluate(self, row):
        return row.fields[self._col_idx]

    def evaluate_join(self, left_row, right_row):
        row = left_row if self.row_idx == 0 else right_row
        return row.fields[self._col_idx]


class ConstantValueExpression(AbstractExpression):
    """A fixed Field value."""

    def __init__(self, value):
        super().__init__((), value.type_id, ExpressionType.CONSTANT)
        self.value = value

    def evaluate(self, row):
        return self.value

    def evaluate_join(self, left_row, right_row):
        return self.value


_COMPARISONS = {
    "=": lambda lhs, rhs: lhs.compare_equals(rhs),
    "<>": lambda lhs, rhs: lhs.compare_not_equals(rhs),
    "<": lambda lhs, rhs: lhs.compare_less_than(rhs),
    "<=": lambda lhs, rhs: lhs.compare_less_than_equals(rhs),
    ">": lambda lhs, rhs: lhs.compare_greater_than(rhs),
    ">=": lambda lhs, rhs: lhs.compare_greater_than_equals(rhs),
    "is": lambda lhs, rhs: cmp_bool(lhs.is_null),
    "not": lambda lhs, rhs: cmp_bool(not lhs.is_null),
}


class ComparisonExpression(AbstractExpression):
    """left <op> right, yielding an INT field holding a CmpBool value."""

    def __init__(self, left, right, comp_type):
        if comp_type not in _COMPARISONS:
            raise ValueError(f"unsupported comparison type {comp_type!r}")
        super().__init__((left, right), TypeId.INT, ExpressionType.COMPARISON)
        self._comp_type = comp_type

    @property
    def comparison_type(self):
        return self._comp_type

    def _perform(self, lhs, rhs):
        return Field(TypeId.INT, int(_COMPARISONS[self._comp_type](lhs, rhs)))

    def evaluate(self, row):
        left, right = self.children
        return self._perform(left.evaluate(row), right.evaluate(row))

    def evaluate_join(self, left_row, right_row):
        left, right = self.children
        return self._perform(
            left.evaluate_join(left_row, right_row), right.evaluate_join(left_row, right_row)
        )


def _as_cmp_bool(value):
    if value.is_null:
        return CmpBool.NULL
    if value.compare_equals(Field(TypeId.INT, 1)) is CmpBool.TRUE:
        return CmpBool.TRUE
    return CmpBool.FALSE


class LogicExpression(AbstractExpression):
    """AND / OR of two boolean (INT) expressions with three-valued logic."""

    def __init__(self, left, right, logic_type):
        super().__init__((left, right), TypeId.INT, ExpressionType.LOGIC)
        if left.return_type is not TypeId.INT or right.return_type is not TypeId.INT:
            raise ValueError("expect boolean from either side")
        self.logic_type = LogicType(logic_type)

    def _perform(self, lhs, rhs):
        left, right = _as_cmp_bool(lhs), _as_cmp_bool(rhs)
        if self.logic_type is LogicType.AND:
            if CmpBool.FALSE in (left, right):
                result = CmpBool.FALSE
            elif left is CmpBool.TRUE and right is CmpBool.TRUE:
                result = CmpBool.TRUE
            else:
                result = CmpBool.NULL
        else:
            if left is CmpBool.FALSE and right is CmpBool.FALSE:
                result = CmpBool.FALSE
            elif CmpBool.TRUE in (left, right):
                result = CmpBool.TRUE
            else:
                result = CmpBool.NULL
        return Field(TypeId.INT, int(result))

    def evaluate(self, row):
        left, right = self.children
        return self._perform(left.evaluate(row), right.evaluate(row))

    def evaluate_join(self, left_row, right_row):
        left, right = self.children
        return self._perform(
            left.evaluate_join(left_row, right_row), right.evaluate_join(left_row, right_row)
        )