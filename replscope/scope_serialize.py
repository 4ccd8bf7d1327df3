from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import toml
import xmltodict
import yaml

from replscope.scope_datatypes import FunctionInfo, VariableInfo
from replscope.scope_printer import Printer

_SUFFIX_FORMATS = {
    '.json': 'json',
    '.yaml': 'yaml',
    '.yml': 'yaml',
    '.toml': 'toml',
    '.xml': 'xml',
}


# --------------------------
# Helpers
# --------------------------

def _variable_entry(info: VariableInfo, printer: Printer) -> dict:
    return {
        'name': info.name,
        'type': info.type_name,
        'value': printer.short_repr(info.value),
        'declared_in': info.declaration.owner.__qualname__,
    }


def _function_entry(info: FunctionInfo, printer: Printer) -> dict:
    return {
        'name': info.name,
        'signature': printer.pformat(info),
        'qualname': info.function.__qualname__,
    }


def detect_format(path: str | Path) -> Optional[str]:
    """Returns 'json', 'yaml', 'toml' or 'xml' from a file suffix, else None."""
    return _SUFFIX_FORMATS.get(Path(path).suffix.lower())


# --------------------------
# Public API
# --------------------------

def snapshot(variables: Mapping[str, VariableInfo],
             functions: Iterable[FunctionInfo]) -> dict:
    """
    Convert the registries into plain data. Values are kept as their
    (truncated) repr, since arbitrary session objects are not serializable.
    """
    printer = Printer(shorten_types=False)
    return {
        'variables': [_variable_entry(variables[n], printer) for n in sorted(variables)],
        'functions': [_function_entry(f, printer) for f in sorted(functions)],
    }


def serialize(value: Any,
              *,
              fmt: str,
              pretty: bool = True,
              xml_root: str = "context") -> str:
    """
    Convert plain data into a textual representation.
    - fmt: 'json' | 'yaml' | 'toml' | 'xml'
    - For XML, list entries become repeated elements under `xml_root`
    """
    f = (fmt or '').lower()
    if f == 'json':
        return json.dumps(value, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(value, sort_keys=False)
    if f == 'toml':
        return toml.dumps(value)
    if f == 'xml':
        body = value
        if isinstance(value, dict):
            # singular element names: <variable>, <function>
            body = {k[:-1] if k.endswith('s') else k: v for k, v in value.items()}
        return xmltodict.unparse({xml_root: body}, pretty=pretty)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


def export_snapshot(path: str | Path,
                    variables: Mapping[str, VariableInfo],
                    functions: Iterable[FunctionInfo],
                    *,
                    fmt: Optional[str] = None) -> str:
    """Write a snapshot of the registries to `path`; returns the format used."""
    f = fmt or detect_format(path)
    if f is None:
        raise ValueError(f"Cannot tell the export format of {str(path)!r}; pass fmt")
    Path(path).write_text(serialize(snapshot(variables, functions), fmt=f), encoding='utf-8')
    return f


__all__ = [
    "snapshot",
    "serialize",
    "detect_format",
    "export_snapshot",
]
