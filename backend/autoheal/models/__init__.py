from autoheal.models.user import User
from autoheal.models.run import Run
from autoheal.models.failure import Failure
from autoheal.models.suggestion import Suggestion
from autoheal.models.approval import Approval
from autoheal.models.selector import Selector
from autoheal.models.pull_request import PullRequest

__all__ = [
    "User",
    "Run",
    "Failure",
    "Suggestion",
    "Approval",
    "Selector",
    "PullRequest",
]
