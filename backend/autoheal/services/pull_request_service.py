"""Open a pull request in the test repository for each approved selector.

A PR is bookkeeping on top of an approval, never a condition for it: GitHub
errors are recorded on the PullRequest row (status failed) and can be retried.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from autoheal.config import get_settings
from autoheal.exceptions import GitHubError, NotFoundError, StateConflictError, ValidationError
from autoheal.models import Approval, Failure, PullRequest, Suggestion
from autoheal.services.github import GitHubClient
from autoheal.services.workflow import PR_FAILED, PR_OPEN, PR_PENDING
from autoheal.storage import Storage

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "GitHub integration is not configured (set GITHUB_TOKEN and GITHUB_REPO)"


@dataclass
class SelectorChange:
    failure_id: str
    suggestion_id: str
    old_selector: str
    new_selector: str
    test_name: str
    spec_path: str
    commit: str
    approved_by: str
    notes: str | None = None
    selector_key: str | None = None


def page_name(spec_path: str) -> str:
    """'cypress/e2e/login-test.cy.js' -> 'logintest'."""
    stem = PurePosixPath(spec_path).name.split(".")[0]
    return re.sub(r"[^a-zA-Z0-9]", "", stem).lower()


def default_selector_key(change: SelectorChange) -> str:
    return f"{page_name(change.spec_path)}.{re.sub(r'[^a-zA-Z0-9]', '', change.test_name).lower()}"


def branch_name(commit: str, test_name: str) -> str:
    slug = re.sub(r"[^a-zA-Z0-9\-_]", "-", test_name).lower()[:30]
    return f"autoheal/update-{commit[:7]}-{slug}"


def describe(change: SelectorChange) -> str:
    return f"""## AutoHeal Selector Update

This PR was opened by AutoHeal after a reviewer approved a replacement selector.

### Test Information
- **Test Name:** {change.test_name}
- **Spec Path:** {change.spec_path}
- **Failure ID:** {change.failure_id}
- **Approved By:** {change.approved_by}

### Selector Change
```diff
- {change.old_selector}
+ {change.new_selector}
```

### Notes
{change.notes or "No additional notes provided."}
"""


class PullRequestService:
    def __init__(self, storage: Storage, github: GitHubClient | None):
        self.storage = storage
        self.github = github
        self.settings = get_settings()

    async def open_for_approval(
        self,
        approval: Approval,
        suggestion: Suggestion,
        failure: Failure,
        selector_key: str | None = None,
    ) -> PullRequest:
        change = SelectorChange(
            failure_id=str(failure.id),
            suggestion_id=str(suggestion.id),
            old_selector=failure.current_selector,
            new_selector=suggestion.chosen_selector,
            test_name=failure.test,
            spec_path=failure.spec_path,
            commit=failure.commit,
            approved_by=approval.approved_by,
            notes=approval.notes,
            selector_key=selector_key,
        )
        record = await self.storage.save_pull_request(
            suggestion.id,
            {
                "approval_id": approval.id,
                "failure_id": failure.id,
                "branch_name": branch_name(change.commit, change.test_name),
                "selector_key": selector_key,
                "status": PR_PENDING,
                "error": None,
            },
        )
        await self.storage.commit()

        if self.github is None:
            logger.info("Skipping pull request for suggestion %s: %s", suggestion.id, NOT_CONFIGURED)
            return await self._record(suggestion.id, {"status": PR_FAILED, "error": NOT_CONFIGURED})

        try:
            pr = await self._open(record.branch_name, change)
        except GitHubError as e:
            logger.error("Failed to open pull request for suggestion %s: %s", suggestion.id, e.message)
            return await self._record(suggestion.id, {"status": PR_FAILED, "error": e.message})

        logger.info("Opened PR #%s for suggestion %s: %s", pr["number"], suggestion.id, pr["html_url"])
        return await self._record(
            suggestion.id,
            {"status": PR_OPEN, "pr_number": pr["number"], "pr_url": pr["html_url"], "error": None},
        )

    async def retry(self, suggestion_id: str) -> PullRequest:
        suggestion = await self.storage.get_suggestion(suggestion_id)
        if not suggestion:
            raise NotFoundError("Suggestion not found")

        approvals = await self.storage.list_approvals(suggestion.id)
        approval = next((a for a in approvals if a.decision == "approve"), None)
        if approval is None:
            raise ValidationError("No approval found for this suggestion")

        failure = await self.storage.get_failure(suggestion.failure_id)
        if not failure:
            raise NotFoundError("Related failure not found")

        existing = await self.storage.get_pull_request(suggestion.id)
        if existing is not None and existing.status == PR_OPEN:
            raise StateConflictError(f"Pull request #{existing.pr_number} is already open")

        selector_key = existing.selector_key if existing else None
        return await self.open_for_approval(approval, suggestion, failure, selector_key)

    async def status(self, suggestion_id: str) -> PullRequest:
        record = await self.storage.get_pull_request(suggestion_id)
        if not record:
            raise NotFoundError("No pull request recorded for this suggestion")
        return record

    async def _record(self, suggestion_id, values: dict) -> PullRequest:
        record = await self.storage.save_pull_request(suggestion_id, values)
        await self.storage.commit()
        return record

    async def _open(self, branch: str, change: SelectorChange) -> dict:
        base = self.settings.github_default_branch
        base_sha = await self.github.get_branch_sha(base)
        await self.github.create_or_reset_branch(branch, base_sha)

        await self._update_selector_map(branch, change)
        await self._update_page_object(branch, change)

        pr = await self.github.create_pull(
            title=f"chore(autoheal): update selector for {change.test_name}",
            body=describe(change),
            head=branch,
            base=base,
        )

        # Labels and reviewers are nice to have; the PR is already open
        try:
            if self.settings.github_labels:
                await self.github.add_labels(pr["number"], self.settings.github_labels)
            if self.settings.github_reviewers:
                await self.github.request_reviewers(pr["number"], self.settings.github_reviewers)
        except GitHubError as e:
            logger.warning("Could not label or assign PR #%s: %s", pr["number"], e.message)
        return pr

    async def _update_selector_map(self, branch: str, change: SelectorChange) -> None:
        path = self.settings.selector_map_path
        existing = await self.github.get_file(path, branch)

        if existing is None:
            key = change.selector_key or default_selector_key(change)
            selector_map = {key: change.new_selector}
            await self.github.put_file(
                path, branch, json.dumps(selector_map, indent=2),
                f"chore(autoheal): create selector map with updated selector (#{change.failure_id})",
            )
            return

        text, sha = existing
        try:
            selector_map = json.loads(text)
        except ValueError as e:
            raise GitHubError(f"{path} on {branch} is not valid JSON", original_error=e) from e
        key = next((k for k, v in selector_map.items() if v == change.old_selector), change.selector_key)
        if key is None:
            logger.warning("No entry in %s maps to %s; leaving it unchanged", path, change.old_selector)
            return

        selector_map[key] = change.new_selector
        await self.github.put_file(
            path, branch, json.dumps(selector_map, indent=2),
            f"chore(autoheal): update selector for {key} (#{change.failure_id})",
            sha=sha,
        )

    async def _update_page_object(self, branch: str, change: SelectorChange) -> None:
        page = page_name(change.spec_path)
        path = f"{self.settings.page_objects_dir}/{page}.po.ts"
        existing = await self.github.get_file(path, branch)
        if existing is None:
            logger.debug("No page object at %s", path)
            return

        text, sha = existing
        if change.old_selector not in text:
            return
        await self.github.put_file(
            path, branch, text.replace(change.old_selector, change.new_selector),
            f"chore(autoheal): update {page} page object selector (#{change.failure_id})",
            sha=sha,
        )
