"""ドメインモデル。

公開 API:
    ExitCode, SyncOutcome, OutcomePolicy, classify_exit_code, policy_for,
    policy_for_exit_code, CounterpartConfig, CloneRequest, CloneResult, RunPaths
"""

from counterpart.models.clone import CloneRequest, CloneResult, RunPaths
from counterpart.models.config import CounterpartConfig
from counterpart.models.exit_code import ExitCode
from counterpart.models.outcome import (
    OutcomePolicy,
    SyncOutcome,
    classify_exit_code,
    policy_for,
    policy_for_exit_code,
)

__all__ = [
    "CloneRequest",
    "CloneResult",
    "CounterpartConfig",
    "ExitCode",
    "OutcomePolicy",
    "RunPaths",
    "SyncOutcome",
    "classify_exit_code",
    "policy_for",
    "policy_for_exit_code",
]
