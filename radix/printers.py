"""
Renderers for RADIX expression trees.

Both printers are transforms producing a string.

Linear form, one line in functional notation:
    +(3, x, *(2, ^(y, 1/2)))

Tree form, drawn with box-drawing characters:
    +
    ├── 3
    ├── x
    ╰── *
        ├── 2
        ╰── ^
            ├── y
            ╰── 1/2
"""

from .nodes import Node, Number, Power, Product, Sum, Transform, Variable

SUM_SYMBOL = "+"
PRODUCT_SYMBOL = "*"
POWER_SYMBOL = "^"


# ============================================================
# Linear Form
# ============================================================

class LinearPrinter(Transform[str]):
    """
    Render a tree on one line.

    Numbers print as "3" or "-1/2", variables by name, and operators as
    +(a, b, ...), *(a, b, ...) and ^(base, exponent).
    """

    name = "linear"

    def visit_number(self, node: Number) -> str:
        return str(node.value)

    def visit_variable(self, node: Variable) -> str:
        return node.name

    def visit_sum(self, node: Sum) -> str:
        return self._call(SUM_SYMBOL, (op.transform(self) for op in node.operands))

    def visit_product(self, node: Product) -> str:
        return self._call(PRODUCT_SYMBOL, (op.transform(self) for op in node.operands))

    def visit_power(self, node: Power) -> str:
        return self._call(POWER_SYMBOL, (node.base.transform(self), str(node.exponent)))

    @staticmethod
    def _call(symbol: str, arguments) -> str:
        return f"{symbol}({', '.join(arguments)})"


def format_linear(node: Node) -> str:
    """Render node in linear form."""
    return node.transform(LinearPrinter())


# ============================================================
# Tree Form
# ============================================================

# Connectors in front of a child, and continuation below it
EXPR = "├── "
CONT = "│   "
LAST_EXPR = "╰── "
LAST_CONT = "    "


class TreePrinter(Transform[str]):
    """
    Render a tree over several lines, one node per line.

    The printer never changes once built; each child is drawn by a new
    printer carrying the indentation for its depth. The exponent of a
    Power is drawn as the last child, below its base.

    Args:
        prefix: Text in front of this node's own line
        child_prefix: Text in front of the lines of this node's children
    """

    name = "tree"

    def __init__(self, prefix: str = "", child_prefix: str = ""):
        self._prefix = prefix
        self._child_prefix = child_prefix

    def visit_number(self, node: Number) -> str:
        return self._line(str(node.value))

    def visit_variable(self, node: Variable) -> str:
        return self._line(node.name)

    def visit_sum(self, node: Sum) -> str:
        return self._operation(SUM_SYMBOL, node.operands)

    def visit_product(self, node: Product) -> str:
        return self._operation(PRODUCT_SYMBOL, node.operands)

    def visit_power(self, node: Power) -> str:
        base = node.base.transform(self._child(last=False))
        exponent = f"{self._child_prefix}{LAST_EXPR}{node.exponent}\n"
        return self._line(POWER_SYMBOL) + base + exponent

    def _operation(self, symbol: str, operands) -> str:
        inner = self._child(last=False)
        parts = [self._line(symbol)]
        parts.extend(op.transform(inner) for op in operands[:-1])
        parts.append(operands[-1].transform(self._child(last=True)))
        return "".join(parts)

    def _line(self, label: str) -> str:
        return f"{self._prefix}{label}\n"

    def _child(self, last: bool) -> 'TreePrinter':
        if last:
            return TreePrinter(self._child_prefix + LAST_EXPR, self._child_prefix + LAST_CONT)
        return TreePrinter(self._child_prefix + EXPR, self._child_prefix + CONT)


def format_tree(node: Node) -> str:
    """Render node in tree form; the result ends with a newline."""
    return node.transform(TreePrinter())
