"""
Expression handling for function layers.

The tracer only depends on the ``ExpressionEvaluator`` capability: compile a
normalized expression string into a callable ``f(x) -> float`` that may raise
for individual inputs. ``SympyEvaluator`` is the concrete engine; compiled
callables are memoized in an injectable ``ExpressionCache`` keyed by the
rewritten expression text.
"""
import logging
import re
from collections import OrderedDict
from typing import Callable, Dict, Optional, Protocol

import sympy as sp
from sympy.parsing.sympy_parser import (
    parse_expr,
    standard_transformations,
    implicit_multiplication_application,
    convert_xor
)

from .config import load_settings
from .errors import ExpressionError

logger = logging.getLogger(__name__)

CompiledFunction = Callable[[float], float]

_Y_PREFIX_RE = re.compile(r"^\s*y\s*=\s*", re.IGNORECASE)

# Digit runs only count when they start a token, so ``log10(`` is left alone
_SOFTEN_RULES = (
    (re.compile(r"\b(\d[\d.]*)\s*x\b", re.IGNORECASE), r"\1*x"),
    (re.compile(r"\b(\d[\d.]*)\s*\("), r"\1*("),
    (re.compile(r"\)\s*x\b", re.IGNORECASE), r")*x"),
    (re.compile(r"\bx\s*\(", re.IGNORECASE), r"x*("),
)


def normalize_expression(expr: str) -> str:
    """Strips surrounding whitespace and a leading ``y =``."""
    return _Y_PREFIX_RE.sub("", expr.strip()).strip()


def soften_implicit_multiplication(s: str) -> str:
    """Best-effort rewrite of ``2x``, ``3(x+1)``, ``)x`` and ``x(`` into explicit products."""
    for pattern, repl in _SOFTEN_RULES:
        s = pattern.sub(repl, s)
    return s


class ExpressionEvaluator(Protocol):
    def compile(self, expr: str) -> CompiledFunction:
        ...


class SympyEvaluator:
    """Parses with sympy and lambdifies against the ``math`` module."""

    def __init__(self):
        self.x = sp.symbols('x')
        self.transformations = (standard_transformations +
                                (implicit_multiplication_application, convert_xor))
        self.local_dict = {"x": self.x, "e": sp.E, "pi": sp.pi, "ln": sp.log}

    def compile(self, expr: str) -> CompiledFunction:
        try:
            parsed = parse_expr(expr, local_dict=dict(self.local_dict), transformations=self.transformations)
            f = sp.lambdify(self.x, parsed, modules=['math'])
        except Exception as e:
            raise ExpressionError(f"Could not parse '{expr}': {e}", expression=expr) from e

        def evaluate(x_val: float) -> float:
            return float(f(x_val))

        return evaluate


class ExpressionCache:
    """Compiled functions keyed by rewritten expression text.

    ``maxsize=None`` keeps every entry; a positive ``maxsize`` evicts the least
    recently used entry once full.
    """

    def __init__(self, maxsize: Optional[int] = None):
        if maxsize is not None and maxsize <= 0:
            raise ValueError("maxsize must be positive or None")
        self.maxsize = maxsize
        self._entries: "OrderedDict[str, CompiledFunction]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[CompiledFunction]:
        fn = self._entries.get(key)
        if fn is None:
            self.misses += 1
            return None
        self.hits += 1
        self._entries.move_to_end(key)
        return fn

    def put(self, key: str, fn: CompiledFunction) -> None:
        self._entries[key] = fn
        self._entries.move_to_end(key)
        if self.maxsize is not None:
            while len(self._entries) > self.maxsize:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted compiled expression %r", evicted)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = self.misses = 0


class ExpressionCompiler:
    """Normalizes, rewrites and compiles expressions through a cache."""

    def __init__(self, evaluator: Optional[ExpressionEvaluator] = None, cache: Optional[ExpressionCache] = None):
        self.evaluator = evaluator if evaluator is not None else SympyEvaluator()
        self.cache = cache if cache is not None else ExpressionCache()

    def rewrite(self, expr: str) -> str:
        norm = normalize_expression(expr)
        if not norm:
            raise ExpressionError("Function expression is empty.", expression=expr)
        return soften_implicit_multiplication(norm)

    def compile(self, expr: str) -> CompiledFunction:
        key = self.rewrite(expr)
        fn = self.cache.get(key)
        if fn is not None:
            logger.debug("Expression cache hit for %r", key)
            return fn
        logger.debug("Compiling expression %r", key)
        fn = self.evaluator.compile(key)
        self.cache.put(key, fn)
        return fn


_shared: Dict[str, ExpressionCompiler] = {}


def default_compiler() -> ExpressionCompiler:
    """Process-wide compiler, sized from GRAPHCORE_EXPRESSION_CACHE_SIZE."""
    if "compiler" not in _shared:
        settings = load_settings()
        _shared["compiler"] = ExpressionCompiler(cache=ExpressionCache(settings.expression_cache_size))
    return _shared["compiler"]
