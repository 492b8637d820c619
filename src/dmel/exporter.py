"""
Model Exporter: writes a model as a standalone R or Python program.

One export produces two streams:
    model stream    header, tables, parameters, variables, expressions
    helpers stream  every helper the model stream calls, each defined once

The exporter owns no translation logic. Expressions go through the
TranslationSession; all target syntax comes from the session's profile.
Helpers are collected while the model stream is written and drained into
the helpers stream at the end, so `write_helpers()` must come last.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, TextIO

from dmel import __version__
from dmel.backends import TableFormat, get_profile
from dmel.config import ExportConfig
from dmel.errors import ExportIOError
from dmel.model import Model
from dmel.numeric import Numeric
from dmel.table_csv import write_table_csv
from dmel.translator import TranslationSession

logger = logging.getLogger(__name__)


class ModelExporter:
    """
    Writes one model through one translation session.

    Args:
        session: TranslationSession (model, profile, helper registry)
        model_out: Text stream for the model program
        helpers_out: Text stream for the helper definitions
        generated: Timestamp written into the header (defaults to now)
    """

    def __init__(self, session: TranslationSession, model_out: TextIO, helpers_out: TextIO,
                 generated: Optional[datetime] = None):
        self.session = session
        self.model = session.model
        self.profile = session.profile
        self.model_out = model_out
        self.helpers_out = helpers_out
        self.generated = generated or datetime.now()

    def _write(self, stream: TextIO, lines: List[str]) -> None:
        try:
            for line in lines:
                stream.write(line + "\n")
        except OSError as e:
            raise ExportIOError(f"Failed to write {self.profile.name} export: {e}") from e

    def _emit(self, lines: List[str]) -> None:
        self._write(self.model_out, lines)

    def _section(self, title: str) -> str:
        return self.profile.comment(f"##{title}")

    def _initializer(self, name: str, value: Optional[Numeric], expression: str,
                     person_level: bool = False) -> str:
        if value is not None:
            return self.profile.assign(name, self.profile.format_scalar(value))
        return self.profile.assign(name, self.session.translate(expression, person_level))

    # =========================================================================
    # MODEL STREAM
    # =========================================================================

    def write_preamble(self) -> None:
        self._emit(self.profile.model_preamble())

    def write_properties(self) -> None:
        """Header block: generator, date, model name/type and metadata."""
        meta = self.model.metadata
        lines = [
            f"This code was auto-generated by dmel {__version__}",
            f"Code generated: {self.generated:%Y-%m-%d %H:%M:%S}",
            f"Model name: {self.model.name}",
            f"Model type: {self.model.model_type.value}",
            f"Simulation type: {self.model.sim_type.value}",
            f"Created by: {meta.author}",
            f"Created: {meta.date_created}",
            f"Version created: {meta.version_created}",
            f"Modified by: {meta.modifier}",
            f"Modified: {meta.date_modified}",
            f"Version modified: {meta.version_modified}",
        ]
        self._emit(self.profile.block_comment(lines) + [""])

    def write_parameters(self) -> None:
        if not self.model.parameters:
            return
        lines = [self._section("Define parameters")]
        for param in self.model.parameters:
            if param.notes:
                lines.append(self.profile.comment(param.notes))
            init = self._initializer(param.name, param.value, param.expression)
            if param.value is not None and param.expression:
                init += " " + self.profile.comment(f"Expression: {param.expression}")
            lines.append(init)
        self._emit(lines + [""])

    def write_variables(self, person_level: bool = False) -> None:
        if not self.model.variables:
            return
        lines = [self._section("Define variables")]
        for var in self.model.variables:
            if var.notes:
                lines.append(self.profile.comment(var.notes))
            lines.append(self._initializer(var.name, var.value, var.expression, person_level))
        self._emit(lines + [""])

    def write_tables(self, table_format: TableFormat = TableFormat.INLINE,
                     csv_dir: Optional[str] = None) -> List[str]:
        """
        Write table definitions.

        With TableFormat.CSV the generated code reads `<name>.csv`; when
        `csv_dir` is given those files are written there too.

        Returns:
            Paths of the CSV files written
        """
        if not self.model.tables:
            return []
        written = []
        lines = [self._section("Define tables")]
        for table in self.model.tables:
            lines.extend(self.profile.table_lines(table, table_format))
            lines.append("")
            for helper in self.profile.table_helpers(table):
                self.session.require_helper(helper)
            if table_format == TableFormat.CSV and csv_dir is not None:
                path = os.path.join(csv_dir, f"{table.name}.csv")
                try:
                    write_table_csv(table, path)
                except OSError as e:
                    raise ExportIOError(f"Failed to write table {path}: {e}", symbol=table.name) from e
                written.append(path)
        self._emit(lines)
        return written

    def write_expression(self, name: str, expression: str, person_level: bool = False) -> str:
        """Translate an expression and write it as an assignment. Returns the line."""
        line = self.profile.assign(name, self.session.translate(expression, person_level))
        self._emit([line])
        return line

    # =========================================================================
    # HELPERS STREAM
    # =========================================================================

    def write_helpers(self) -> List[str]:
        """Drain the helper registry into the helpers stream. Returns helper names."""
        helpers = self.session.flush_helpers()
        lines = list(self.profile.helpers_preamble())
        for helper in helpers:
            lines.extend(helper.text.split("\n"))
            lines.append("")
        self._write(self.helpers_out, lines)
        logger.info("Wrote %d helper definitions (%s)", len(helpers), self.profile.name)
        return [helper.name for helper in helpers]

    def export(self, table_format: TableFormat = TableFormat.INLINE,
               csv_dir: Optional[str] = None, person_level: bool = False) -> "ExportResult":
        """Write the whole model, then its helpers."""
        self.write_preamble()
        self.write_properties()
        csv_files = self.write_tables(table_format, csv_dir)
        self.write_parameters()
        self.write_variables(person_level)
        helpers = self.write_helpers()
        return ExportResult(target=self.profile.name, helpers=helpers, csv_files=csv_files)


@dataclass
class ExportResult:
    """What an export wrote."""
    target: str
    helpers: List[str] = field(default_factory=list)
    csv_files: List[str] = field(default_factory=list)
    model_file: str = ""
    helpers_file: str = ""


def export_model(model: Model, config: ExportConfig) -> ExportResult:
    """
    Export a model into `config.output_dir`.

    Writes model.<ext> and functions.<ext> (plus one CSV per table with
    table_format csv).

    Raises:
        ExportIOError: the output directory or a file cannot be written
        TranslationError: an expression cannot be translated
    """
    profile = get_profile(config.target)
    session = TranslationSession(model, profile, strict=config.strict_symbols,
                                 max_depth=config.max_depth)
    model_path = os.path.join(config.output_dir, profile.model_file)
    helpers_path = os.path.join(config.output_dir, profile.helpers_file)
    csv_dir = config.output_dir if config.table_format == TableFormat.CSV else None

    logger.info("Exporting model '%s' to %s (%s)", model.name, config.output_dir, profile.name)
    try:
        os.makedirs(config.output_dir, exist_ok=True)
        with open(model_path, "w", encoding="utf-8") as model_out, \
                open(helpers_path, "w", encoding="utf-8") as helpers_out:
            exporter = ModelExporter(session, model_out, helpers_out)
            result = exporter.export(config.table_format, csv_dir, config.person_level)
    except OSError as e:
        raise ExportIOError(f"Cannot write export to {config.output_dir}: {e}") from e

    result.model_file = model_path
    result.helpers_file = helpers_path
    return result


__all__ = ["ModelExporter", "ExportResult", "export_model"]
