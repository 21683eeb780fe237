from autoheal.schemas.dashboard import DashboardStats
from autoheal.services.workflow import FAILURE_STATUSES, RUN_STATUSES
from autoheal.storage import Storage


async def collect_stats(storage: Storage) -> DashboardStats:
    failures = await storage.failure_status_counts()
    runs = await storage.run_status_counts()
    approvals = await storage.approval_decision_counts()

    failures_by_status = {status: failures.get(status, 0) for status in FAILURE_STATUSES}
    runs_by_status = {status: runs.get(status, 0) for status in RUN_STATUSES}
    approvals_by_decision = {decision: approvals.get(decision, 0) for decision in ("approve", "reject")}

    return DashboardStats(
        total_failures=sum(failures.values()),
        failures_by_status=failures_by_status,
        total_runs=sum(runs.values()),
        runs_by_status=runs_by_status,
        approvals_by_decision=approvals_by_decision,
    )
