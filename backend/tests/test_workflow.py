import pytest

from autoheal.services.workflow import (
    APPROVED,
    NEW,
    REJECTED,
    SUGGESTED,
    can_transition,
    is_terminal,
)


@pytest.mark.parametrize(
    "current, target",
    [(NEW, SUGGESTED), (SUGGESTED, APPROVED), (SUGGESTED, REJECTED)],
)
def test_allowed_transitions(current: str, target: str) -> None:
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        (NEW, APPROVED),
        (NEW, REJECTED),
        (SUGGESTED, NEW),
        (APPROVED, REJECTED),
        (REJECTED, APPROVED),
        (APPROVED, SUGGESTED),
        ("unknown", SUGGESTED),
    ],
)
def test_forbidden_transitions(current: str, target: str) -> None:
    assert not can_transition(current, target)


def test_terminal_statuses() -> None:
    assert is_terminal(APPROVED)
    assert is_terminal(REJECTED)
    assert not is_terminal(NEW)
    assert not is_terminal(SUGGESTED)
