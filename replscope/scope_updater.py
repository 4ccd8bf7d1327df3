"""
ContextUpdater keeps the user-defined variables and functions of a session
up to date, for completion and for the `kc` context object.
"""

from typing import Any, Callable, List, MutableMapping, MutableSet

from loguru import logger

from replscope.scope_datatypes import (
    ContextError, Failure, FailureKind, FunctionInfo, UpdateReport, VariableInfo,
)
from replscope.scope_functions import rebuild_functions
from replscope.scope_history import ordered_units
from replscope.scope_members import ENTRY_POINT
from replscope.scope_variables import SHADOWING_POLICIES, Shadowing, rebuild_variables

# Reflection on a malformed compiled line surfaces as one of these.
_REFLECTIVE_ERRORS = (ContextError, AttributeError, TypeError)


def _classify(e: BaseException) -> FailureKind:
    if isinstance(e, ContextError):
        return e.kind
    return FailureKind.REFLECTIVE_ACCESS


class ContextUpdater:
    """Rebuilds externally owned variable and function registries from a history.

    Every call to `update` discards and recomputes both registries. Failures
    are logged and reported, never raised.
    """

    def __init__(self,
                 history: Any,
                 variables: MutableMapping[str, VariableInfo],
                 functions: MutableSet[FunctionInfo],
                 *,
                 entry_point: str = ENTRY_POINT,
                 shadowing: Shadowing = 'first',
                 keep_last_good: bool = False):
        if shadowing not in SHADOWING_POLICIES:
            raise ValueError(f"Unknown shadowing policy: {shadowing!r}")
        self.history = history
        self.variables = variables
        self.functions = functions
        self.entry_point = entry_point
        self.shadowing = shadowing
        # When set, a failed stage leaves the previous registry untouched
        self.keep_last_good = keep_last_good

    def update(self) -> UpdateReport:
        failures: List[Failure] = []
        try:
            units = ordered_units(self.history)
        except _REFLECTIVE_ERRORS as e:
            logger.opt(exception=e).error("Exception reading the execution history")
            failures.append(Failure("history", _classify(e), str(e), e))
            return UpdateReport('error', len(self.variables), len(self.functions), failures)

        self._run_stage(
            "variables", "Exception updating current variables", self.variables, dict,
            lambda target: rebuild_variables(units, target, shadowing=self.shadowing),
            failures)
        self._run_stage(
            "functions", "Exception updating current functions", self.functions, set,
            lambda target: rebuild_functions(units, target, entry_point=self.entry_point),
            failures)

        if not failures:
            status = 'success'
        elif len(failures) == 2:
            status = 'error'
        else:
            status = 'partial'
        logger.debug("Context rebuilt from {} lines: {} variables, {} functions ({})",
                     len(units), len(self.variables), len(self.functions), status)
        return UpdateReport(status, len(self.variables), len(self.functions), failures)

    def _run_stage(self, stage: str, message: str, registry, scratch_factory: Callable,
                   rebuild: Callable, failures: List[Failure]):
        target = scratch_factory() if self.keep_last_good else registry
        try:
            rebuild(target)
        except _REFLECTIVE_ERRORS as e:
            logger.opt(exception=e).error(message)
            failures.append(Failure(stage, _classify(e), str(e), e))
            return
        if target is not registry:
            registry.clear()
            registry.update(target)
