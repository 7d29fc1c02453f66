"""data-jar - a hierarchical typed key/value store with derived values."""

from __future__ import annotations

from data_jar.api import display_value, evaluate, export_json, import_json
from data_jar.config import JarConfig
from data_jar.errors import (
    ArithmeticEvaluationError,
    ImportFormatError,
    InvalidEditError,
    InvalidPathError,
    InvalidTriggerError,
    JarError,
    PersistFormatError,
    ReferenceNotFound,
)
from data_jar.jar import DataJar
from data_jar.result import ERROR_SENTINEL, EvaluationResult, SetOutcome
from data_jar.store import JarStore
from data_jar.tree import (
    Boolean,
    Dictionary,
    Expression,
    List,
    Node,
    NodeKind,
    Number,
    Text,
    deep_set,
    delete,
    resolve,
    update_value,
)

__version__: str = "0.1.0"
__all__: list[str] = [
    "ERROR_SENTINEL",
    "ArithmeticEvaluationError",
    "Boolean",
    "DataJar",
    "Dictionary",
    "EvaluationResult",
    "Expression",
    "ImportFormatError",
    "InvalidEditError",
    "InvalidPathError",
    "InvalidTriggerError",
    "JarConfig",
    "JarError",
    "JarStore",
    "List",
    "Node",
    "NodeKind",
    "Number",
    "PersistFormatError",
    "ReferenceNotFound",
    "SetOutcome",
    "Text",
    "deep_set",
    "delete",
    "display_value",
    "evaluate",
    "export_json",
    "import_json",
    "resolve",
    "update_value",
]
