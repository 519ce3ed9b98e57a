"""Desktop shell provisioner (idempotent, dependency-ordered).

Core design goals:
- Declarative target state, compiled in
- Idempotent actions with explicit satisfaction checks
- Deterministic ordering from prerequisite edges
- Recoverable by default, fatal only for true precondition failures
- Centralized logging and a final report instead of tracebacks
"""

__all__ = []
