"""autoheal-simulate: synthesize Cypress failure reports for manual inspection.

Prints the generated payloads and, with --submit, posts each one to a running
AutoHeal API the way the Cypress plugin would.
"""

import json
import logging
import time
from copy import deepcopy

import click
import httpx

from autoheal.logging_config import configure_logging

logger = logging.getLogger(__name__)

SCENARIOS = [
    {
        "slug": "login",
        "branch": "main",
        "commit": "abc123def",
        "suite": "authentication",
        "test": "user login flow with data-testid selectors",
        "specPath": "cypress/e2e/login-test.cy.js",
        "screenshotPath": "cypress/screenshots/login-test-failure.png",
        "domHtml": (
            '<div class="login-form">\n'
            "  <h2>Login to AutoHeal</h2>\n"
            '  <input class="username-field" placeholder="Username" />\n'
            '  <input class="password-field" type="password" placeholder="Password" />\n'
            '  <button class="login-btn">Login</button>\n'
            "</div>"
        ),
        "currentSelector": '[data-testid="login-submit-button"]',
        "selectorContext": {
            "element": "button",
            "text": "Login",
            "className": "login-btn",
            "position": {"x": 150, "y": 300},
        },
        "requests": [("GET", "/", 200), ("POST", "/api/auth/login", 0)],
    },
    {
        "slug": "dashboard",
        "branch": "feature/pagination",
        "commit": "def456ghi",
        "suite": "dashboard",
        "test": "pagination controls navigation",
        "specPath": "cypress/e2e/dashboard-test.cy.js",
        "screenshotPath": "cypress/screenshots/dashboard-test-failure.png",
        "domHtml": (
            '<div class="pagination-wrapper">\n'
            '  <div class="pagination-info">Showing 1-10 of 50 results</div>\n'
            '  <div class="pagination-controls">\n'
            '    <button class="prev-btn" disabled>Previous</button>\n'
            '    <span class="page-numbers">1 2 3 4 5</span>\n'
            '    <button class="next-btn">Next</button>\n'
            "  </div>\n"
            "</div>"
        ),
        "currentSelector": '[data-testid="pagination-next-btn"]',
        "selectorContext": {
            "element": "button",
            "text": "Next",
            "className": "next-btn",
            "position": {"x": 400, "y": 450},
        },
        "requests": [("GET", "/dashboard", 200), ("GET", "/api/failures?page=2", 0)],
    },
]


def not_found_message(selector: str) -> str:
    return (
        "AssertionError: Timed out retrying after 5000ms: "
        f"Expected to find element: {selector}, but never found it."
    )


def build_failures(count: int, repo: str, browser: str = "chrome", viewport: str = "1280x720") -> list[dict]:
    """Build count failure payloads, cycling through the known scenarios."""
    now_ms = int(time.time() * 1000)
    failures = []
    for index in range(count):
        scenario = deepcopy(SCENARIOS[index % len(SCENARIOS)])
        requests = scenario.pop("requests")
        slug = scenario.pop("slug")
        error = not_found_message(scenario["currentSelector"])

        failures.append({
            "runId": f"run-{now_ms}-{slug}",
            "repo": repo,
            "browser": browser,
            "viewport": viewport,
            **scenario,
            "consoleLogs": [{"level": "error", "message": error, "timestamp": now_ms}],
            "networkLogs": [
                {"method": method, "url": url, "status": status, "timestamp": now_ms + offset}
                for offset, (method, url, status) in enumerate(requests)
            ],
            "errorMessage": error,
        })
    return failures


def submit_failure(client: httpx.Client, api_url: str, failure: dict) -> str:
    response = client.post(f"{api_url.rstrip('/')}/api/failures", json=failure)
    response.raise_for_status()
    return response.json()["id"]


@click.command()
@click.option("--count", default=2, show_default=True, type=click.IntRange(min=1), help="Number of failures to generate")
@click.option("--repo", default="autoheal-demo", show_default=True, help="Repository name to report")
@click.option("--submit", "api_url", default=None, metavar="URL", help="Post each failure to the AutoHeal API at URL")
@click.option("--json", "as_json", is_flag=True, help="Print payloads as one JSON array")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def simulate(count: int, repo: str, api_url: str | None, as_json: bool, verbose: bool) -> None:
    """Generate sample Cypress failure reports."""
    configure_logging(level="DEBUG" if verbose else "WARNING")
    failures = build_failures(count, repo)

    if as_json:
        click.echo(json.dumps(failures, indent=2))
    else:
        for failure in failures:
            click.echo(f"Test:       {failure['suite']} / {failure['test']}")
            click.echo(f"Selector:   {failure['currentSelector']}")
            click.echo(f"Screenshot: {failure['screenshotPath']}")
            click.echo(f"Error:      {failure['errorMessage']}")
            click.echo("")

    if api_url:
        with httpx.Client(timeout=10.0) as client:
            for failure in failures:
                try:
                    failure_id = submit_failure(client, api_url, failure)
                except httpx.HTTPError as e:
                    raise click.ClickException(f"Failed to submit {failure['runId']}: {e}") from e
                logger.debug("Submitted %s as %s", failure["runId"], failure_id)
                click.echo(f"Submitted {failure['runId']} -> {failure_id}", err=as_json)

    if not as_json:
        click.echo(f"{len(failures)} failure(s) generated")


if __name__ == "__main__":
    simulate()
