from autoheal.schemas.common import CamelModel


class DashboardStats(CamelModel):
    total_failures: int
    failures_by_status: dict[str, int]
    total_runs: int
    runs_by_status: dict[str, int]
    approvals_by_decision: dict[str, int]
