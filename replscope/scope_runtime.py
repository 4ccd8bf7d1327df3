"""
The interactive session: evaluates lines of Python source, records each one
as a compiled line in the history and keeps the context registries current.
"""

import builtins
import traceback
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Set, Type

from loguru import logger

from replscope.scope_compiler import REPL_MODULE, LineCompiler, SessionReceiver, run_compiled
from replscope.scope_config import SessionConfig
from replscope.scope_datatypes import FunctionInfo, UpdateReport, VariableInfo
from replscope.scope_history import ReplHistory
from replscope.scope_members import is_internal
from replscope.scope_receiver import declaration_layers
from replscope.scope_updater import ContextUpdater

# ===================================================================
# Line Execution
# ===================================================================


@dataclass
class ExecutionResult:
    """The structured result of evaluating one line."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    line_no: Optional[int] = None
    report: Optional[UpdateReport] = None

    def format_error(self) -> str:
        """Formats an error message with the session line number if available."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")
        if self.line_no is not None and not msg.startswith("Error in line "):
            return f"Error in line {self.line_no}: {msg}"
        return msg


def receiver_bindings(receiver: Any) -> Dict[str, Any]:
    """The user-visible bindings a receiver contributes, highest precedence first."""
    bindings: Dict[str, Any] = {}
    for layer in declaration_layers(receiver):
        for name, value in layer.members.items():
            if not is_internal(name):
                bindings.setdefault(name, value)
    return bindings


class ReplSession:
    """Compiles, evaluates and records Python lines, keeping the context current."""

    def __init__(self, config: Optional[SessionConfig] = None,
                 receiver_class: Type[SessionReceiver] = SessionReceiver):
        self.config = config or SessionConfig()
        self.receiver_class = receiver_class
        self.compiler = LineCompiler()
        self.history = ReplHistory()
        # Owned here, rebuilt in place by the updater
        self.variables: Dict[str, VariableInfo] = {}
        self.functions: Set[FunctionInfo] = set()
        self.updater = ContextUpdater(
            self.history, self.variables, self.functions,
            entry_point=self.config.entry_point,
            shadowing=self.config.shadowing,
            keep_last_good=self.config.keep_last_good,
        )
        self.last_report: Optional[UpdateReport] = None
        self._start()

    def _start(self):
        if self.config.implicit_receiver:
            self.receiver = self.receiver_class(self.variables, self.functions)
        else:
            self.receiver = None
        self.namespace: Dict[str, Any] = {"__name__": REPL_MODULE, "__builtins__": builtins}

    def reset(self):
        """Forget every evaluated line and start from a fresh receiver."""
        self.history.reset()
        self.variables.clear()
        self.functions.clear()
        self.last_report = None
        self._start()
        logger.info("Session reset")

    def _seed_namespace(self):
        if self.receiver is None:
            return
        for name, value in receiver_bindings(self.receiver).items():
            self.namespace.setdefault(name, value)

    def _source_context(self, source: str, line: int, col: Optional[int], radius: int = 2) -> str:
        lines = source.splitlines()
        if not line or line < 1 or line > len(lines):
            return ""
        start = max(1, line - radius)
        end = min(len(lines), line + radius)
        width = len(str(end))
        out = []
        for i in range(start, end + 1):
            prefix = ">" if i == line else " "
            out.append(f"{prefix} {str(i).rjust(width)} | {lines[i - 1]}")
            if i == line and col is not None:
                caret = " " * max(col - 1, 0)
                out.append(f"  {' ' * width} | {caret}^")
        return "\n".join(out)

    def _format_syntax_error(self, e: SyntaxError, source: str) -> str:
        msg = f"SyntaxError: {e.msg}"
        if e.lineno is not None:
            col_info = f", col {e.offset}" if e.offset is not None else ""
            msg = f"{msg} (line {e.lineno}{col_info})\n{self._source_context(source, e.lineno, e.offset)}"
        return msg

    def _format_runtime_error(self, e: BaseException, source: str, filename: str) -> str:
        msg = "".join(traceback.format_exception_only(type(e), e)).strip()
        # Point at the innermost frame that belongs to the evaluated snippet
        lineno = None
        for frame in traceback.extract_tb(e.__traceback__):
            if frame.filename == filename:
                lineno = frame.lineno
        if lineno is not None:
            msg = f"{msg}\n{self._source_context(source, lineno, None)}"
        return msg

    async def handle_line(self, source_code: str) -> ExecutionResult:
        """The main entry point to evaluate one line of session input."""
        line_no = self.history.next_line_no
        # 1. Parse
        try:
            compiled = self.compiler.compile(source_code, line_no)
        except SyntaxError as e:
            return ExecutionResult('error', error_message=self._format_syntax_error(e, source_code),
                                   line_no=line_no)

        # 2. Evaluate
        self._seed_namespace()
        try:
            value = await run_compiled(compiled, self.namespace)
        except Exception as e:
            msg = self._format_runtime_error(e, source_code, compiled.filename)
            return ExecutionResult('error', error_message=msg, line_no=line_no)

        # 3. Record and refresh the context
        try:
            unit = self.compiler.build_line(compiled, self.namespace, self.receiver, value)
        except Exception as e:
            logger.opt(exception=e).error("Exception recording line {}", line_no)
            return ExecutionResult('error', error_message=f"{type(e).__name__}: {e}", line_no=line_no)
        self.history.push(source_code, unit)
        self.last_report = self.updater.update()
        return ExecutionResult('success', value=value, line_no=line_no, report=self.last_report)
