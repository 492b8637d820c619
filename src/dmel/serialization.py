"""
Serialization helpers for model declarations (Model, Table, Variable, ...).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
Enums are written as their wire strings. Splines are derived data: they are
never written and are recomputed when a table is loaded.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from dmel.model import (
    Model,
    ModelMetadata,
    Parameter,
    Table,
    Variable,
)
from dmel.numeric import Numeric, NumericType


def numeric_to_dict(n: Numeric | None) -> Dict[str, Any] | None:
    if n is None:
        return None
    value = n.value
    if n.is_matrix():
        value = [list(row) for row in value]
    return {"type": n.type.value, "value": value}


def numeric_from_dict(d: Dict[str, Any] | None) -> Numeric | None:
    if d is None:
        return None
    t = NumericType(d["type"])
    if t == NumericType.REAL:
        return Numeric.real(d["value"])
    if t == NumericType.INTEGER:
        return Numeric.integer(d["value"])
    if t == NumericType.BOOLEAN:
        return Numeric.boolean(d["value"])
    return Numeric.matrix(d["value"])


def table_to_dict(t: Table) -> Dict[str, Any]:
    d = {
        "name": t.name,
        "type": t.type.value,
        "headers": list(t.headers),
        "data": [list(row) for row in t.data],
        "notes": t.notes,
    }
    if t.lookup_method is not None:
        d["lookup_method"] = t.lookup_method.value
        d["interpolate"] = t.interpolate.value
        d["boundary"] = t.boundary.value
        d["extrapolate"] = t.extrapolate.value
    return d


def table_from_dict(d: Dict[str, Any]) -> Table:
    return Table(
        name=d["name"],
        type=d["type"],
        headers=d.get("headers", []),
        data=d.get("data", []),
        lookup_method=d.get("lookup_method"),
        interpolate=d.get("interpolate"),
        boundary=d.get("boundary"),
        extrapolate=d.get("extrapolate"),
        notes=d.get("notes", ""),
    ).finalize()


def variable_to_dict(v: Variable) -> Dict[str, Any]:
    return {
        "name": v.name,
        "expression": v.expression,
        "value": numeric_to_dict(v.value),
        "notes": v.notes,
    }


def variable_from_dict(d: Dict[str, Any]) -> Variable:
    return Variable(
        name=d["name"],
        expression=d.get("expression", ""),
        value=numeric_from_dict(d.get("value")),
        notes=d.get("notes", ""),
    )


def parameter_to_dict(p: Parameter) -> Dict[str, Any]:
    return {
        "name": p.name,
        "expression": p.expression,
        "value": numeric_to_dict(p.value),
        "notes": p.notes,
    }


def parameter_from_dict(d: Dict[str, Any]) -> Parameter:
    return Parameter(
        name=d["name"],
        expression=d.get("expression", ""),
        value=numeric_from_dict(d.get("value")),
        notes=d.get("notes", ""),
    )


def metadata_to_dict(m: ModelMetadata) -> Dict[str, Any]:
    return {
        "author": m.author,
        "date_created": m.date_created,
        "version_created": m.version_created,
        "modifier": m.modifier,
        "date_modified": m.date_modified,
        "version_modified": m.version_modified,
    }


def metadata_from_dict(d: Dict[str, Any] | None) -> ModelMetadata:
    d = d or {}
    return ModelMetadata(**{k: str(d.get(k, "") or "") for k in metadata_to_dict(ModelMetadata())})


def model_to_dict(m: Model) -> Dict[str, Any]:
    return {
        "name": m.name,
        "model_type": m.model_type.value,
        "sim_type": m.sim_type.value,
        "metadata": metadata_to_dict(m.metadata),
        "parameters": [parameter_to_dict(p) for p in m.parameters],
        "variables": [variable_to_dict(v) for v in m.variables],
        "tables": [table_to_dict(t) for t in m.tables],
    }


def model_from_dict(d: Dict[str, Any]) -> Model:
    return Model(
        name=d.get("name", ""),
        model_type=d.get("model_type", "Markov Model"),
        sim_type=d.get("sim_type", "Cohort"),
        metadata=metadata_from_dict(d.get("metadata")),
        parameters=[parameter_from_dict(p) for p in d.get("parameters", [])],
        variables=[variable_from_dict(v) for v in d.get("variables", [])],
        tables=[table_from_dict(t) for t in d.get("tables", [])],
    )


def model_to_json(m: Model) -> str:
    return json.dumps(model_to_dict(m), sort_keys=True)


def model_from_json(s: str) -> Model:
    d = json.loads(s)
    return model_from_dict(d)


def model_to_yaml(m: Model) -> str:
    return yaml.safe_dump(model_to_dict(m), sort_keys=False, allow_unicode=True)


def model_from_yaml(s: str) -> Model:
    d = yaml.safe_load(s)
    return model_from_dict(d)


def load_model(path: str) -> Model:
    """Load a model from a .json, .yaml or .yml file."""
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    if path.lower().endswith(".json"):
        return model_from_json(content)
    return model_from_yaml(content)
