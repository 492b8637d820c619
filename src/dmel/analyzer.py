"""
Model Analyzer: early diagnostics and inventory of model expressions.

This module provides lightweight analysis of Model objects:
    - Symbol usage inventory (tables, variables, functions, ...)
    - Unknown symbols the translator would reject
    - Unused variables and tables
    - Circular variable definitions
    - Expression nesting metrics

IMPORTANT: This is read-only. It classifies words exactly as the
translator does but never translates or modifies the model.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from dmel.catalogue import BUILTINS, DISTRIBUTION_SELECTORS, Catalogue
from dmel.errors import TranslationError
from dmel.model import Model, TableType
from dmel.scanner import iter_word_spans, match_bracket, nesting_depth, split_args, strip_whitespace
from dmel.translator import SymbolKind, Translator

DEPTH_WARNING = 10


@dataclass
class ExpressionMetrics:
    """Metrics about a single expression."""
    depth: int = 0
    word_count: int = 0
    symbols: Dict[SymbolKind, Set[str]] = field(default_factory=lambda: defaultdict(set))
    unknown: Set[str] = field(default_factory=set)


def _analyze_expression(expression: str, translator: Translator) -> ExpressionMetrics:
    text = strip_whitespace(expression or "")
    metrics = ExpressionMetrics(depth=nesting_depth(text))
    # Lookup column arguments are resolved against headers, never translated
    column_spans: List[Tuple[int, int]] = []
    for start, word, sep in iter_word_spans(text):
        if not word:
            continue
        metrics.word_count += 1
        kind = translator.classify(word, sep)
        if (kind == SymbolKind.TABLE_REF and sep == "["
                and translator.model.get_table(word).type == TableType.LOOKUP):
            open_pos = start + len(word)
            close = match_bracket(text, open_pos)
            args = split_args(text[open_pos + 1:close])
            if len(args) == 2:
                column_spans.append((close - len(args[1]), close))
        if kind == SymbolKind.LITERAL:
            if any(lo <= start < hi for lo, hi in column_spans):
                continue
            if translator.is_known_literal(word) or word in DISTRIBUTION_SELECTORS:
                continue
            metrics.unknown.add(word)
            continue
        metrics.symbols[kind].add(word)
    return metrics


def _find_cycles_dfs(graph: Dict[str, List[str]], start: str, visited: Set[str],
                     rec_stack: Set[str], path: List[str]) -> Optional[List[str]]:
    """DFS to find a cycle starting from a node."""
    visited.add(start)
    rec_stack.add(start)
    path.append(start)

    for neighbor in graph.get(start, []):
        if neighbor not in visited:
            cycle = _find_cycles_dfs(graph, neighbor, visited, rec_stack, path[:])
            if cycle:
                return cycle
        elif neighbor in rec_stack:
            cycle_start_idx = path.index(neighbor)
            return path[cycle_start_idx:] + [neighbor]

    rec_stack.remove(start)
    return None


@dataclass
class ModelReport:
    """Analysis report for a model."""

    model_name: str
    total_parameters: int = 0
    total_variables: int = 0
    total_tables: int = 0
    tables_by_type: Dict[str, int] = field(default_factory=dict)

    # Symbol usage: kind -> name -> number of expressions using it
    symbol_usage: Dict[str, Dict[str, int]] = field(default_factory=dict)
    unknown_symbols: Dict[str, Set[str]] = field(default_factory=dict)
    unused_variables: Set[str] = field(default_factory=set)
    unused_tables: Set[str] = field(default_factory=set)

    has_cycles: bool = False
    cycle_example: Optional[List[str]] = None

    # Expression complexity
    max_nesting_depth: int = 0
    total_words: int = 0

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    def used(self, kind: SymbolKind) -> Set[str]:
        return set(self.symbol_usage.get(kind.value, {}))


def analyze_model(model: Model, catalogue: Catalogue = BUILTINS) -> ModelReport:
    """
    Analyze every parameter and variable expression of a model.

    Returns a ModelReport with metrics and warnings.
    """
    report = ModelReport(model_name=model.name)
    translator = Translator(model, catalogue)

    report.total_parameters = len(model.parameters)
    report.total_variables = len(model.variables)
    report.total_tables = len(model.tables)
    for table in model.tables:
        report.tables_by_type[table.type.value] = report.tables_by_type.get(table.type.value, 0) + 1

    # =========================================================================
    # 1. SYMBOL USAGE
    # =========================================================================

    usage: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    depends_on: Dict[str, List[str]] = {}

    owners = [(p.name, p.expression, "parameter") for p in model.parameters]
    owners += [(v.name, v.expression, "variable") for v in model.variables]

    for name, expression, role in owners:
        try:
            metrics = _analyze_expression(expression, translator)
        except TranslationError as e:
            report.add_warning(f"Cannot scan '{name}': {e}")
            continue
        report.max_nesting_depth = max(report.max_nesting_depth, metrics.depth)
        report.total_words += metrics.word_count
        for kind, names in metrics.symbols.items():
            for symbol in names:
                usage[kind.value][symbol] += 1
        if metrics.unknown:
            report.unknown_symbols[name] = metrics.unknown

        referenced_vars = sorted(metrics.symbols.get(SymbolKind.VARIABLE_REF, set()))
        depends_on[name] = referenced_vars
        if role == "parameter" and referenced_vars:
            report.add_warning(
                f"Parameter '{name}' depends on variables: {', '.join(referenced_vars)}"
            )

    report.symbol_usage = {kind: dict(names) for kind, names in usage.items()}

    # =========================================================================
    # 2. UNUSED DECLARATIONS
    # =========================================================================

    report.unused_variables = {v.name for v in model.variables} - report.used(SymbolKind.VARIABLE_REF)
    report.unused_tables = {t.name for t in model.tables} - report.used(SymbolKind.TABLE_REF)

    # =========================================================================
    # 3. CIRCULAR DEFINITIONS
    # =========================================================================

    visited: Set[str] = set()
    for name in depends_on:
        if name not in visited:
            cycle = _find_cycles_dfs(depends_on, name, visited, set(), [])
            if cycle:
                report.has_cycles = True
                report.cycle_example = cycle
                break

    # =========================================================================
    # 4. WARNING FLAGS
    # =========================================================================

    for owner, symbols in report.unknown_symbols.items():
        report.add_warning(f"Unknown symbols in '{owner}': {', '.join(sorted(symbols))}")

    if report.unused_variables:
        report.add_warning(f"Unused variables: {', '.join(sorted(report.unused_variables))}")

    if report.unused_tables:
        report.add_warning(f"Unused tables: {', '.join(sorted(report.unused_tables))}")

    if report.has_cycles:
        report.add_warning(f"Circular definition: {' -> '.join(report.cycle_example)}")

    if report.max_nesting_depth > DEPTH_WARNING:
        report.add_warning(f"High expression complexity: max nesting depth {report.max_nesting_depth}")

    return report


__all__ = ["ExpressionMetrics", "ModelReport", "analyze_model"]
