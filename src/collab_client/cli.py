"""CLI for the collaboration client."""

from typing import Annotated, Literal

import structlog
from cyclopts import App, Parameter

from collab_client.client import DEFAULT_TIMEOUT, ApiClient, Session
from collab_client.config import get_config
from collab_client.config_commands import config_app
from collab_client.entity_commands import groups_app, projects_app, tasks_app
from collab_client.errors import TransportError
from collab_client.fetchers import ProjectFetcher, TaskFetcher
from collab_client.stats import summarize

logger = structlog.get_logger()

app = App(
    help="collab - groups, projects and tasks from the collaboration backend",
)

app.command(groups_app)
app.command(projects_app)
app.command(tasks_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def build_client() -> ApiClient:
    """Build the API client from configuration."""
    config = get_config()
    base_url = config.get("api.base_url")
    if not base_url:
        raise ValueError("API base URL not configured. Set it using:\n  collab config set api.base_url <url>")
    timeout = config.get_float("api.timeout", DEFAULT_TIMEOUT)
    return ApiClient(base_url=str(base_url), timeout=timeout)


def build_session() -> Session:
    """Build the caller session from configuration."""
    config = get_config()
    token = config.get("api.token")
    user_id = config.get_int("api.user_id")
    logger.debug("Session built", authenticated=user_id is not None, has_token=bool(token))
    return Session(token=str(token) if token else None, user_id=user_id)


@app.command
def stats() -> None:
    """Show dashboard statistics for projects and tasks."""
    session = build_session()
    with build_client() as client:
        try:
            projects = ProjectFetcher(client).get_all(session)
            tasks = TaskFetcher(client).get_all(session)
        except TransportError as e:
            print(f"Error: {e.user_message('Failed to load statistics')}")
            return

    summary = summarize(projects, tasks)
    print(f"Projects: {summary.total_projects}")
    print(f"Tasks: {summary.total_tasks}")
    print(f"Completed: {summary.completed_tasks}")
    print(f"In progress: {summary.in_progress_tasks}")
    if summary.project_status:
        print("\nProjects by status:")
        for status, count in summary.project_status.items():
            print(f"  {status}: {count}")
    if summary.task_state:
        print("\nTasks by state:")
        for state, count in summary.task_state.items():
            print(f"  {state}: {count}")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
