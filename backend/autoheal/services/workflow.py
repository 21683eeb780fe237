"""Failure status state machine.

A failure moves new -> suggested when its first suggestion is recorded, and
suggested -> approved/rejected when a reviewer decides. Decisions are final.
"""

NEW = "new"
SUGGESTED = "suggested"
APPROVED = "approved"
REJECTED = "rejected"

FAILURE_STATUSES = (NEW, SUGGESTED, APPROVED, REJECTED)

FAILURE_TRANSITIONS: dict[str, frozenset[str]] = {
    NEW: frozenset({SUGGESTED}),
    SUGGESTED: frozenset({APPROVED, REJECTED}),
    APPROVED: frozenset(),
    REJECTED: frozenset(),
}

DECISION_STATUS = {
    "approve": APPROVED,
    "reject": REJECTED,
}

RUN_RUNNING = "running"
RUN_COMPLETED = "completed"
RUN_FAILED = "failed"
RUN_STATUSES = (RUN_RUNNING, RUN_COMPLETED, RUN_FAILED)

PR_PENDING = "pending"
PR_OPEN = "open"
PR_FAILED = "failed"
PR_STATUSES = (PR_PENDING, PR_OPEN, PR_FAILED)


def can_transition(current: str, target: str) -> bool:
    return target in FAILURE_TRANSITIONS.get(current, frozenset())


def is_terminal(status: str) -> bool:
    return not FAILURE_TRANSITIONS.get(status)
