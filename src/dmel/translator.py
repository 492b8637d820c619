"""
Symbol Classifier & Recursive Translator

Rewrites a mini-language expression into target-language source text.

The expression is scanned left to right, one word at a time. Each word is
classified into exactly one SymbolKind (first match wins):

    TABLE_REF             declared table            T[i,'col'], D(c), M[r,c], M
    VARIABLE_REF          declared variable         age
    TRACE_REF             Markov trace              trace[t,'Sick'], trace[t,2]
    FUNCTION_CALL         built-in function         exp(x)
    MATRIX_FUNCTION_CALL  built-in matrix function  tr(M)
    DISTRIBUTION_CALL     distribution              Norm(mu,sd,~)
    CONSTANT_REF          named constant            pi
    MATRIX_LITERAL        bracketed literal         [[1,2],[3,4]]
    LITERAL               everything else           3.5, +, (, 'text', parameters

Operands (indices, arguments) are translated recursively. Each branch
either consumes one balanced delimiter span or advances by one word; there
is no backtracking.

The translator itself is stateless. Per-export state (backend profile,
helper registry, recursion depth) lives in the TranslationSession passed
through every call.
"""

import logging
import re
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple

from dmel.backends import BackendProfile, TranslationMode
from dmel.backends.profile import expect_args
from dmel.catalogue import BOOLEANS, BUILTINS, DISTRIBUTION_SELECTORS, TRACE_KEYWORD, Catalogue
from dmel.errors import ExpressionSyntaxError, ExpressionTooDeep, UnknownSymbol
from dmel.model import Model, TableType
from dmel.numeric import parse_matrix
from dmel.scanner import (
    QUOTES,
    match_bracket,
    match_paren,
    next_break,
    split_args,
    strip_whitespace,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100

_NUMBER_RE = re.compile(r'^(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


class SymbolKind(Enum):
    TABLE_REF = "table"
    VARIABLE_REF = "variable"
    TRACE_REF = "trace"
    FUNCTION_CALL = "function"
    MATRIX_FUNCTION_CALL = "matrix_function"
    DISTRIBUTION_CALL = "distribution"
    CONSTANT_REF = "constant"
    MATRIX_LITERAL = "matrix_literal"
    LITERAL = "literal"


@dataclass(frozen=True)
class HelperDefinition:
    """A named helper emitted once into the helpers stream."""
    name: str
    text: str


class HelperRegistry:
    """
    Ordered, deduplicated helper definitions for one export session.

    Adding a name that is already registered is a no-op, so a helper is
    emitted exactly once however many times expressions use it.
    """

    def __init__(self):
        self._definitions: Dict[str, str] = {}

    def add(self, name: str, text: str) -> bool:
        """Register a helper. Returns False if it was already registered."""
        if name in self._definitions:
            return False
        self._definitions[name] = text
        logger.debug("Registered helper %s", name)
        return True

    def names(self) -> List[str]:
        return list(self._definitions)

    def drain(self) -> List[HelperDefinition]:
        """Return all registered helpers in registration order and clear."""
        drained = [HelperDefinition(name, text) for name, text in self._definitions.items()]
        self._definitions = {}
        return drained

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


class TranslationSession:
    """
    One export session: a backend profile, a helper registry and the
    translation entry point.

    Sessions share nothing. Two exports running side by side (say R and
    Python) each build their own session.

    Args:
        model: Registry of tables, variables and parameters
        profile: Backend profile for the export target
        catalogue: Built-in names (defaults to BUILTINS)
        strict: Raise UnknownSymbol for unrecognised identifiers; when
            False they pass through unchanged with a UserWarning
        max_depth: Maximum nesting of translated operands
    """

    def __init__(self, model: Model, profile: BackendProfile,
                 catalogue: Catalogue = BUILTINS, strict: bool = True,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        self.model = model
        self.profile = profile
        self.strict = strict
        self.max_depth = max_depth
        self.helpers = HelperRegistry()
        self.translator = Translator(model, catalogue)
        self._depth = 0

    def translate(self, expression: str, person_level: bool = False) -> str:
        """Translate one expression into the session's target language."""
        try:
            return self.translator.translate(expression, person_level, self)
        except RecursionError as e:
            self._depth = 0
            raise ExpressionTooDeep(
                f"Expression nesting exceeds the interpreter stack: {expression[:60]}"
            ) from e

    def flush_helpers(self) -> List[HelperDefinition]:
        """Drain the helper registry for emission."""
        return self.helpers.drain()

    def require_helper(self, name: str) -> None:
        """Register a runtime helper and the helpers it calls."""
        for dependency in self.profile.runtime_dependencies.get(name, ()):
            self.require_helper(dependency)
        self.helpers.add(name, self.profile.runtime_helper(name))

    def enter(self, expression: str) -> None:
        self._depth += 1
        if self._depth > self.max_depth:
            self._depth -= 1
            raise ExpressionTooDeep(
                f"Expression nesting exceeds {self.max_depth} levels: {expression[:60]}"
            )

    def leave(self) -> None:
        self._depth = max(0, self._depth - 1)

    @property
    def depth(self) -> int:
        return self._depth


Handler = Callable[..., Tuple[str, int]]


class Translator:
    """
    Target-agnostic classifier and recursive translator.

    Holds only read-only collaborators (the model registry and the
    built-in catalogue); everything mutable comes in through the session.
    """

    def __init__(self, model: Model, catalogue: Catalogue = BUILTINS):
        self.model = model
        self.catalogue = catalogue
        self._handlers: Dict[SymbolKind, Handler] = {
            SymbolKind.TABLE_REF: self._table,
            SymbolKind.VARIABLE_REF: self._variable,
            SymbolKind.TRACE_REF: self._trace,
            SymbolKind.FUNCTION_CALL: self._function,
            SymbolKind.MATRIX_FUNCTION_CALL: self._matrix_function,
            SymbolKind.DISTRIBUTION_CALL: self._distribution,
            SymbolKind.CONSTANT_REF: self._constant,
            SymbolKind.MATRIX_LITERAL: self._matrix_literal,
            SymbolKind.LITERAL: self._literal,
        }

    def classify(self, word: str, next_char: str = "") -> SymbolKind:
        """Decide what a word means. `next_char` is the character after it."""
        if self.model.is_table(word):
            return SymbolKind.TABLE_REF
        if self.model.is_variable(word):
            return SymbolKind.VARIABLE_REF
        if word == TRACE_KEYWORD and next_char == "[":
            return SymbolKind.TRACE_REF
        if self.catalogue.is_function(word):
            return SymbolKind.FUNCTION_CALL
        if self.catalogue.is_matrix_function(word):
            return SymbolKind.MATRIX_FUNCTION_CALL
        if self.catalogue.is_distribution(word):
            return SymbolKind.DISTRIBUTION_CALL
        if self.catalogue.is_constant(word):
            return SymbolKind.CONSTANT_REF
        if not word and next_char == "[":
            return SymbolKind.MATRIX_LITERAL
        return SymbolKind.LITERAL

    def is_known_literal(self, word: str) -> bool:
        """True for words the LITERAL branch may emit without complaint."""
        return bool(
            _NUMBER_RE.match(word)
            or word[:1] in QUOTES
            or word in BOOLEANS
            or self.model.is_parameter(word)
            or self.catalogue.is_keyword(word)
        )

    def translate(self, expression: str, person_level: bool,
                  session: TranslationSession) -> str:
        session.enter(expression)
        try:
            text = strip_whitespace(expression)
            out: List[str] = []
            pos = 0
            while pos < len(text):
                end = next_break(text, pos)
                word = text[pos:end]
                next_char = text[end] if end < len(text) else ""
                kind = self.classify(word, next_char)
                emitted, pos = self._handlers[kind](word, text, pos, end, person_level, session)
                out.append(emitted)
        finally:
            session.leave()

        result = "".join(out)
        if session.depth == 0:
            logger.debug("Translated %r -> %r (%s)", expression, result, session.profile.name)
        return result

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _span(self, word: str, text: str, end: int, opener: str) -> Tuple[List[str], int]:
        """Split the delimiter span that must follow `word`; return (args, close)."""
        if end >= len(text) or text[end] != opener:
            raise ExpressionSyntaxError(f"Expected '{opener}' after '{word}'", symbol=word)
        close = match_bracket(text, end) if opener == "[" else match_paren(text, end)
        return split_args(text[end + 1:close]), close

    def _recurse(self, person_level: bool, session: TranslationSession) -> Callable[[str], str]:
        return lambda arg: self.translate(arg, person_level, session)

    # =========================================================================
    # HANDLERS: (word, text, start, end, person_level, session) -> (emitted, next_pos)
    # =========================================================================

    def _table(self, word, text, start, end, person_level, session):
        table = self.model.get_table(word)
        profile = session.profile
        sub = self._recurse(person_level, session)

        if table.type == TableType.LOOKUP:
            args, close = self._span(word, text, end, "[")
            expect_args(word, args, 2)
            col = table.column_index(args[1])
            call_args = [
                table.name,
                sub(args[0]),
                str(col),
                profile.format_string(table.lookup_method.value),
                profile.format_string(table.interpolate.value),
                profile.format_string(table.boundary.value),
                profile.format_string(table.extrapolate.value),
            ]
            if table.uses_splines:
                call_args += [
                    f"{table.name}_knots_{col}",
                    f"{table.name}_knotHeights_{col}",
                    f"{table.name}_splineCoeffs_{col}",
                    f"{table.name}_boundaryCondition_{col}",
                ]
            session.require_helper("lookupTable")
            return profile.call("lookupTable", call_args), close + 1

        if table.type == TableType.DISTRIBUTION:
            args, close = self._span(word, text, end, "(")
            expect_args(word, args, 1)
            session.require_helper("calcTableEV")
            return profile.call("calcTableEV", [table.name, sub(args[0])]), close + 1

        # Matrix table: indexed element or the whole matrix
        if end < len(text) and text[end] == "[":
            args, close = self._span(word, text, end, "[")
            expect_args(word, args, 2)
            row = profile.offset_index(sub(args[0]))
            col = profile.offset_index(sub(args[1]))
            return profile.matrix_element(table.name, row, col), close + 1
        return table.name, end

    def _variable(self, word, text, start, end, person_level, session):
        if person_level:
            return session.profile.person_reference(word), end
        return word, end

    def _trace(self, word, text, start, end, person_level, session):
        profile = session.profile
        args, close = self._span(word, text, end, "[")
        expect_args(word, args, 2)
        row = profile.offset_index(self.translate(args[0], person_level, session))
        column = args[1]
        if column[:1] in QUOTES:
            return profile.trace_by_name(column[1:-1], row), close + 1
        col = profile.offset_index(self.translate(column, person_level, session))
        return profile.trace_by_index(row, col), close + 1

    def _call(self, word, text, end, person_level, session, matrix):
        profile = session.profile
        args, close = self._span(word, text, end, "(")
        rule = profile.function_rule(word, matrix)
        sub = self._recurse(person_level, session)

        if rule.mode == TranslationMode.DIRECT:
            emitted = profile.call(rule.target, [sub(a) for a in args])
        elif rule.mode == TranslationMode.DEFINE_ONCE:
            emitted = profile.call(word, [sub(a) for a in args])
            session.helpers.add(word, rule.definition)
        else:
            emitted = rule.rewrite(args, sub)
        return emitted, close + 1

    def _function(self, word, text, start, end, person_level, session):
        return self._call(word, text, end, person_level, session, matrix=False)

    def _matrix_function(self, word, text, start, end, person_level, session):
        return self._call(word, text, end, person_level, session, matrix=True)

    def _distribution(self, word, text, start, end, person_level, session):
        args, close = self._span(word, text, end, "(")
        translated = []
        for i, arg in enumerate(args):
            if i == len(args) - 1 and arg in DISTRIBUTION_SELECTORS:
                translated.append(arg)
            else:
                translated.append(self.translate(arg, person_level, session))
        return session.profile.call(word, translated), close + 1

    def _constant(self, word, text, start, end, person_level, session):
        return session.profile.constant_literal(word), end

    def _matrix_literal(self, word, text, start, end, person_level, session):
        close = match_bracket(text, start)
        value = parse_matrix(text[start + 1:close])
        return session.profile.format_scalar(value), close + 1

    def _literal(self, word, text, start, end, person_level, session):
        if not word:
            # Operator, comma or grouping delimiter
            return session.profile.format_operator(text[start]), start + 1
        if word in BOOLEANS:
            return session.profile.format_boolean(word == "true"), end
        if not self.is_known_literal(word):
            self._unknown(word, session)
        return word, end

    def _unknown(self, word: str, session: TranslationSession) -> None:
        message = f"Unknown symbol '{word}'"
        if session.strict:
            raise UnknownSymbol(message, symbol=word)
        warnings.warn(f"{message} passed through unchanged", UserWarning)


def translate(expression: str, model: Model, profile: BackendProfile,
              person_level: bool = False, strict: bool = True) -> str:
    """Translate a single expression in a throwaway session."""
    session = TranslationSession(model, profile, strict=strict)
    return session.translate(expression, person_level)


__all__ = [
    "SymbolKind",
    "HelperDefinition",
    "HelperRegistry",
    "TranslationSession",
    "Translator",
    "translate",
    "DEFAULT_MAX_DEPTH",
]
