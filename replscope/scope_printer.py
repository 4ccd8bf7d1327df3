"""
A pretty-printer for session context data.
"""
import collections.abc
import inspect
import re
import reprlib

from replscope.scope_datatypes import (
    Failure, FunctionInfo, UpdateReport, VariableInfo, type_display,
)

# `typing.List[int]` -> `List[int]`, `collections.OrderedDict` -> `OrderedDict`
_QUALIFIED = re.compile(r"\b(?:[A-Za-z_]\w*\.)+([A-Za-z_]\w*)")


class _Shown:
    """An annotation rendered verbatim inside a signature."""
    def __init__(self, text):
        self.text = text

    def __repr__(self):
        return self.text


class Printer:
    """Formats variable and function bindings into readable one-line summaries."""

    def __init__(self, max_value_width=60, shorten_types=True):
        self._repr = reprlib.Repr()
        self._repr.maxstring = max_value_width
        self._repr.maxother = max_value_width
        self.shorten_types = shorten_types
        self._handlers = self._create_handlers()

    def pformat(self, obj):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj)

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method."""
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        if isinstance(obj, collections.abc.Mapping): return self._pformat_variables
        if isinstance(obj, collections.abc.Set): return self._pformat_functions
        # Default to Python's repr for unknown types
        return repr

    def _create_handlers(self):
        return {
            VariableInfo: self._pformat_variable,
            FunctionInfo: self._pformat_function,
            UpdateReport: self._pformat_report,
            Failure: self._pformat_failure,
        }

    def _shorten(self, text: str) -> str:
        return _QUALIFIED.sub(r"\1", text) if self.shorten_types else text

    def _annotation(self, annotation):
        if annotation is inspect.Parameter.empty:
            return annotation
        return _Shown(self._shorten(type_display(annotation)))

    def short_repr(self, value) -> str:
        return self._repr.repr(value)

    def _pformat_variable(self, info: VariableInfo):
        return f"{info.name}: {self._shorten(info.type_name)} = {self.short_repr(info.value)}"

    def _pformat_function(self, info: FunctionInfo):
        sig = info.signature
        if sig is None:
            return f"{info.name}(...)"
        params = [p.replace(annotation=self._annotation(p.annotation)) for p in sig.parameters.values()]
        sig = sig.replace(parameters=params, return_annotation=self._annotation(sig.return_annotation))
        return f"{info.name}{sig}"

    def _pformat_variables(self, variables):
        if not variables:
            return "(no variables)"
        return "\n".join(self._pformat_variable(variables[name]) for name in sorted(variables))

    def _pformat_functions(self, functions):
        if not functions:
            return "(no functions)"
        return "\n".join(self._pformat_function(info) for info in sorted(functions))

    def _pformat_failure(self, failure: Failure):
        return f"[{failure.kind.value}] {failure.stage}: {failure.message}"

    def _pformat_report(self, report: UpdateReport):
        head = f"context {report.status}: {report.variables} variables, {report.functions} functions"
        lines = [head] + [f"  {self._pformat_failure(f)}" for f in report.failures]
        return "\n".join(lines)
