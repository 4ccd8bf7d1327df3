from replscope.scope_compiler import LineCompiler, ReplContext, ReplLine, SessionReceiver
from replscope.scope_config import SessionConfig, load_config
from replscope.scope_datatypes import (
    ConfigError, ContextError, Declaration, DeclarationLayer, Failure, FailureKind,
    FunctionInfo, MissingReceiverError, NullHistoryError, ReflectiveAccessError,
    UpdateReport, VariableInfo,
)
from replscope.scope_history import HistoryRecord, ReplHistory, ordered_units
from replscope.scope_members import is_internal, resolve_function, synthetic
from replscope.scope_printer import Printer
from replscope.scope_receiver import declaration_layers, resolve_receiver
from replscope.scope_runtime import ExecutionResult, ReplSession
from replscope.scope_updater import ContextUpdater
from replscope.scope_functions import rebuild_functions
from replscope.scope_variables import rebuild_variables
