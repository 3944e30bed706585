"""Fetcher implementations."""

from collab_client.fetchers.groups import GroupFetcher
from collab_client.fetchers.projects import ProjectFetcher
from collab_client.fetchers.tasks import TaskFetcher

__all__ = ["GroupFetcher", "ProjectFetcher", "TaskFetcher"]
