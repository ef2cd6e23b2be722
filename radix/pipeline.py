"""
Pass pipelines for RADIX.

A Pipeline applies tree-to-tree passes one after the other. Pipelines are
built with >> on passes, or from a textual description:

    normalize = Expand() >> Simplify()
    normalize(E("^ + x 1 2"))            # => +(1, ^(x, 2), *(2, x))

    derive = parse_pipeline("d:x, simplify")
    derive(E("^ x 3"))                   # => *(3, ^(x, 2))

Tracing:
    Call a pipeline with trace=True to get a PassTrace recording the tree
    before and after every pass:

    result, trace = normalize(expr, trace=True)
    print(trace.format("chain"))
"""

import logging
from typing import Dict, Iterable, List, Tuple, Union

from .nodes import Node, Transform
from .passes import Differentiate, Expand, Simplify

logger = logging.getLogger("radix.pipeline")


# ============================================================
# Tracing
# ============================================================

class PassStep:
    """A single pass application in a pipeline trace."""

    def __init__(self, index: int, name: str, before: Node, after: Node):
        self.index = index
        self.name = name
        self.before = before
        self.after = after

    @property
    def changed(self) -> bool:
        """True if the pass rewrote the tree."""
        return self.before != self.after

    def __repr__(self) -> str:
        return f"{self.name}: {self.before} → {self.after}"

    def to_dict(self) -> Dict:
        """Convert step to dictionary for serialization."""
        return {
            "index": self.index,
            "name": self.name,
            "before": str(self.before),
            "after": str(self.after),
            "changed": self.changed,
        }


class PassTrace:
    """
    A trace of every pass applied by a pipeline.

    Provides multiple formatting options:
        - Default repr: verbose multi-line format
        - format("compact"): single line showing the pass chain
        - format("passes"): just the pass names applied
        - format("chain"): the tree after each pass
        - to_dict(): JSON-serializable dictionary
    """

    def __init__(self):
        self.steps: List[PassStep] = []
        self.initial: Node = None
        self.final: Node = None

    def add_step(self, step: PassStep):
        self.steps.append(step)

    def format(self, style: str = "verbose") -> str:
        """
        Format the trace in different styles.

        Args:
            style: One of "verbose", "compact", "passes", "chain"

        Returns:
            Formatted string representation of the trace.
        """
        if style == "compact":
            return f"{self.initial} --[{', '.join(self.passes_applied())}]--> {self.final}"

        elif style == "passes":
            names = self.passes_applied()
            return " -> ".join(names) if names else "(no passes applied)"

        elif style == "chain":
            parts = [str(self.initial)]
            for step in self.steps:
                parts.append(f"  --({step.name})-->")
                parts.append(str(step.after))
            return "\n".join(parts)

        else:  # verbose (default)
            return repr(self)

    def __repr__(self) -> str:
        lines = [f"Initial: {self.initial}"]
        for i, step in enumerate(self.steps, 1):
            marker = "" if step.changed else " (unchanged)"
            lines.append(f"  {i}. {step}{marker}")
        lines.append(f"Final: {self.final}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        """Iterate over pass steps."""
        return iter(self.steps)

    def __bool__(self) -> bool:
        """True if any pass was applied."""
        return len(self.steps) > 0

    def to_dict(self) -> Dict:
        """Convert trace to dictionary for JSON serialization."""
        return {
            "initial": None if self.initial is None else str(self.initial),
            "final": None if self.final is None else str(self.final),
            "steps": [step.to_dict() for step in self.steps],
            "step_count": len(self.steps),
        }

    def passes_applied(self) -> List[str]:
        """Get list of pass names in order of application."""
        return [step.name for step in self.steps]

    def summary(self) -> str:
        """Get a brief summary of the pipeline run."""
        if not self.steps:
            return "No passes applied"
        changed = sum(1 for step in self.steps if step.changed)
        return f"{len(self.steps)} passes applied, {changed} changed the expression"


# ============================================================
# Pipelines
# ============================================================

class Pipeline:
    """
    An ordered sequence of tree-to-tree passes.

    Pipelines are immutable: >> returns a new pipeline.

    Example:
        pipeline = Pipeline([Differentiate("x")]) >> Simplify()
        pipeline(E("* x x"))                # => *(2, x)
        result, trace = pipeline(E("* x x"), trace=True)
    """

    def __init__(self, passes: Iterable[Transform] = ()):
        self._passes: Tuple[Transform, ...] = tuple(passes)
        for pass_ in self._passes:
            if not isinstance(pass_, Transform):
                raise TypeError(f"Pipeline stages must be Transforms, got {type(pass_).__name__}")

    def __call__(self, tree: Node, trace: bool = False) -> Union[Node, Tuple[Node, PassTrace]]:
        """
        Apply every pass in order.

        Args:
            tree: Expression to rewrite
            trace: If True, also return a PassTrace

        Returns:
            The rewritten tree, or (tree, trace) if trace is True
        """
        pass_trace = PassTrace()
        pass_trace.initial = tree

        result = tree
        for index, pass_ in enumerate(self._passes):
            before = result
            result = result.transform(pass_)
            logger.debug("Pass %d (%s): %s -> %s", index, pass_.name, before, result)
            pass_trace.add_step(PassStep(index, pass_.name, before, result))

        pass_trace.final = result
        if trace:
            return result, pass_trace
        return result

    def __rshift__(self, other: Union[Transform, 'Pipeline']) -> 'Pipeline':
        """Chain another pass or pipeline: (a >> b) >> c."""
        if isinstance(other, Pipeline):
            return Pipeline(self._passes + other._passes)
        if isinstance(other, Transform):
            return Pipeline(self._passes + (other,))
        return NotImplemented

    def names(self) -> List[str]:
        """Names of the passes, in order."""
        return [pass_.name for pass_ in self._passes]

    def __repr__(self) -> str:
        return f"Pipeline({', '.join(self.names())})"

    def __len__(self) -> int:
        """Number of passes."""
        return len(self._passes)

    def __iter__(self):
        """Iterate over passes."""
        return iter(self._passes)


# ============================================================
# Pass Specs
# ============================================================

BUILTIN_PASSES = {
    "simplify": Simplify,
    "expand": Expand,
    "differentiate": Differentiate,
    "d": Differentiate,
}

# Passes whose spec carries a variable: "differentiate:x"
_VARIABLE_PASSES = {"differentiate", "d"}


def build_pass(spec: str) -> Transform:
    """
    Build a pass from its textual spec.

    Examples:
        build_pass("simplify")         -> Simplify()
        build_pass("differentiate:x")  -> Differentiate('x')
        build_pass("d:y")              -> Differentiate('y')

    Raises:
        ValueError: If the pass is unknown or its argument is missing or invalid
    """
    name, sep, argument = spec.strip().partition(':')
    name, argument = name.strip().lower(), argument.strip()

    factory = BUILTIN_PASSES.get(name)
    if factory is None:
        known = ", ".join(sorted(BUILTIN_PASSES))
        raise ValueError(f"Unknown pass: {name!r} (known: {known})")

    if name in _VARIABLE_PASSES:
        if not argument:
            raise ValueError(f"Pass {name!r} requires a variable, e.g. {name}:x")
        return factory(argument)

    if sep:
        raise ValueError(f"Pass {name!r} takes no argument")
    return factory()


def parse_pipeline(text: str) -> Pipeline:
    """
    Build a pipeline from comma-separated pass specs.

    Example:
        parse_pipeline("expand, simplify")   -> Pipeline(expand, simplify)
    """
    return Pipeline(build_pass(part) for part in text.split(',') if part.strip())
