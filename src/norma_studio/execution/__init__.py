"""Engine capability types, scheduling and the execution controller."""

from .controller import (
    ControllerState,
    ControllerStateError,
    EmptySourceError,
    ExecutionController,
)
from .engine import (
    CompileError,
    Compiler,
    Diagnostic,
    EngineError,
    InstructionInfo,
    InvalidInputError,
    RegisterValue,
    Span,
    StepStatus,
    VmData,
    VmError,
    VmHandle,
    VmSnapshot,
    VmStatus,
)
from .scheduler import AsyncioScheduler, Cancellable, Scheduler

__all__ = [
    "AsyncioScheduler",
    "Cancellable",
    "CompileError",
    "Compiler",
    "ControllerState",
    "ControllerStateError",
    "Diagnostic",
    "EmptySourceError",
    "EngineError",
    "ExecutionController",
    "InstructionInfo",
    "InvalidInputError",
    "RegisterValue",
    "Scheduler",
    "Span",
    "StepStatus",
    "VmData",
    "VmError",
    "VmHandle",
    "VmSnapshot",
    "VmStatus",
]
