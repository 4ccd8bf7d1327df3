"""
Compiles snippets of Python source into compiled lines.

Every evaluated snippet becomes an instance of a fresh `ReplLine` subclass:

  - functions the snippet defines become static methods of that class,
  - names the snippet assigns become attributes of the instance, holding the
    values they had right after evaluation,
  - the receiver link, the source and the result are stored under synthetic
    field names that `is_internal` recognises.

The shared `SessionReceiver` carries session-wide bindings such as `kc`, the
`ReplContext` through which user code can inspect its own session.
"""

import ast
import codeop
import inspect
import types
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, MutableMapping, MutableSet, Optional

from replscope.scope_datatypes import FunctionInfo, VariableInfo
from replscope.scope_members import (
    RECEIVER_FIELD, RESULT_FIELD, SOURCE_FIELD, VARS_CACHE_FIELD, is_dunder, synthetic,
)
from replscope.scope_variables import variable_values

REPL_MODULE = "__repl__"


# ===================================================================
# 1. Session receiver
# ===================================================================

class ReplContext:
    """Read access to the session's current bindings, exposed to user code as `kc`."""

    def __init__(self, variables: Mapping[str, VariableInfo], functions: MutableSet[FunctionInfo]):
        self._variables = variables
        self._functions = functions

    def get_vars(self) -> Mapping[str, VariableInfo]:
        return types.MappingProxyType(self._variables)

    def get_functions(self) -> frozenset:
        return frozenset(self._functions)

    def values(self) -> Dict[str, Any]:
        return variable_values(self._variables)

    def __repr__(self):
        return f"<ReplContext: {len(self._variables)} variables, {len(self._functions)} functions>"


class SessionReceiver:
    """The implicit receiver shared by every line of a session.

    Subclass it to add session-wide bindings; class attributes of every
    subclass in the MRO are visible to user code and to the context.
    """

    def __init__(self, variables: MutableMapping[str, VariableInfo], functions: MutableSet[FunctionInfo]):
        self.kc = ReplContext(variables, functions)
        setattr(self, VARS_CACHE_FIELD, variables)


# ===================================================================
# 2. Compiled lines
# ===================================================================

class ReplLine:
    """Base class of every compiled line."""

    @synthetic
    def __init__(self, receiver: Any, source: str, result: Any = None):
        setattr(self, RECEIVER_FIELD, receiver)
        setattr(self, SOURCE_FIELD, source)
        setattr(self, RESULT_FIELD, result)

    @synthetic
    def result(self):
        return getattr(self, RESULT_FIELD)

    def main(self):
        """Entry point of the line: the value it evaluated to."""
        return self.result()

    @synthetic
    def __repr__(self):
        return f"<{type(self).__name__} {getattr(self, SOURCE_FIELD)!r}>"


class _TopLevelBindings(ast.NodeVisitor):
    """Collects the names a snippet binds in the session namespace."""

    def __init__(self):
        self.declared: List[str] = []
        self.functions: List[str] = []
        self.annotations: Dict[str, str] = {}

    def _bind(self, target):
        for node in ast.walk(target):
            if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Store):
                if node.id not in self.declared:
                    self.declared.append(node.id)

    def visit_Assign(self, node):
        for target in node.targets:
            self._bind(target)
        self.visit(node.value)

    def visit_AnnAssign(self, node):
        # a bare `x: int` binds nothing
        if node.value is None:
            return
        self._bind(node.target)
        if isinstance(node.target, ast.Name):
            self.annotations[node.target.id] = ast.unparse(node.annotation)
        self.visit(node.value)

    def visit_AugAssign(self, node):
        self._bind(node.target)
        self.visit(node.value)

    def visit_NamedExpr(self, node):
        self._bind(node.target)
        self.visit(node.value)

    def visit_For(self, node):
        self._bind(node.target)
        self.generic_visit(node)

    visit_AsyncFor = visit_For

    def visit_With(self, node):
        for item in node.items:
            if item.optional_vars is not None:
                self._bind(item.optional_vars)
        self.generic_visit(node)

    visit_AsyncWith = visit_With

    def visit_FunctionDef(self, node):
        if node.name not in self.functions:
            self.functions.append(node.name)

    visit_AsyncFunctionDef = visit_FunctionDef

    # New scopes: nothing inside binds at top level.
    def visit_ClassDef(self, node):
        pass

    def visit_Lambda(self, node):
        pass

    def visit_ListComp(self, node):
        pass

    visit_SetComp = visit_DictComp = visit_GeneratorExp = visit_ListComp


@dataclass
class CompiledSource:
    """A parsed snippet, split into statements and an optional trailing expression."""
    line_no: int
    source: str
    filename: str
    body: types.CodeType
    tail: Optional[types.CodeType] = None
    declared: List[str] = field(default_factory=list)
    functions: List[str] = field(default_factory=list)
    annotations: Dict[str, str] = field(default_factory=dict)


class LineCompiler:
    """Parses snippets and builds the compiled line of each evaluated one."""

    FLAGS = ast.PyCF_ALLOW_TOP_LEVEL_AWAIT

    def __init__(self):
        self._command_compiler = codeop.CommandCompiler()
        self._command_compiler.compiler.flags |= self.FLAGS

    @staticmethod
    def filename(line_no: int) -> str:
        return f"<line {line_no}>"

    def is_complete(self, source: str) -> bool:
        """False while `source` still needs continuation lines."""
        try:
            return self._command_compiler(source, "<input>", "exec") is not None
        except (SyntaxError, ValueError, OverflowError):
            # complete, but broken; evaluation reports the error
            return True

    def compile(self, source: str, line_no: int) -> CompiledSource:
        filename = self.filename(line_no)
        tree = compile(source, filename, "exec", ast.PyCF_ONLY_AST | self.FLAGS)

        bindings = _TopLevelBindings()
        for stmt in tree.body:
            bindings.visit(stmt)

        statements = tree.body
        tail = None
        # The value of a trailing expression is the line's result
        if statements and isinstance(statements[-1], ast.Expr):
            tail = compile(ast.Expression(statements[-1].value), filename, "eval", self.FLAGS)
            statements = statements[:-1]
        body = compile(ast.Module(body=statements, type_ignores=[]), filename, "exec", self.FLAGS)

        return CompiledSource(
            line_no=line_no,
            source=source,
            filename=filename,
            body=body,
            tail=tail,
            declared=bindings.declared,
            functions=bindings.functions,
            annotations=bindings.annotations,
        )

    def build_line(self, compiled: CompiledSource, namespace: Mapping[str, Any],
                   receiver: Any, result: Any = None) -> ReplLine:
        """Snapshot the bindings of an evaluated snippet into a compiled line."""
        members: Dict[str, Any] = {
            "__module__": REPL_MODULE,
            "__annotations__": dict(compiled.annotations),
        }
        for name in compiled.functions:
            # dunder names belong to the line class itself
            if is_dunder(name):
                continue
            value = namespace.get(name)
            if callable(value):
                members[name] = staticmethod(value)

        line_cls = type(f"Line_{compiled.line_no}", (ReplLine,), members)
        line = line_cls(receiver, compiled.source, result)
        for name in compiled.declared:
            if is_dunder(name) or name not in namespace:
                continue
            setattr(line, name, namespace[name])
        return line


async def run_compiled(compiled: CompiledSource, namespace: Dict[str, Any]) -> Any:
    """Evaluate a compiled snippet in `namespace`, awaiting top-level awaits."""

    async def _run(code):
        value = eval(code, namespace)
        if code.co_flags & inspect.CO_COROUTINE:
            value = await value
        return value

    await _run(compiled.body)
    if compiled.tail is None:
        return None
    return await _run(compiled.tail)
