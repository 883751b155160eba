"""Cloud Tasks helpers: task construction and queue submission."""
import logging
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple, Union

from google.auth.credentials import Credentials
from google.cloud import tasks_v2

logger = logging.getLogger(__name__)


class TaskHelper:
    """Builds HTTP target tasks."""

    @staticmethod
    def new_task(
        url: str,
        method: Union[str, tasks_v2.HttpMethod],
        body: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        name: Optional[str] = None,
        schedule_time: Optional[datetime] = None,
        oidc_token: Optional[tasks_v2.OidcToken] = None,
        dispatch_deadline: Optional[timedelta] = None,
    ) -> tasks_v2.Task:
        """
        Build a Task with an HTTP request target.

        Fields left as None are not set, so Cloud Tasks applies its own
        defaults when the task is created. Only the method name is checked
        here; bad URLs are rejected by the service at push time.

        Args:
            url: Target URL
            method: HTTP verb ("POST", "get", ...) or tasks_v2.HttpMethod
            body: Request body
            headers: Request headers
            name: Fully qualified task name; generated by the service if None
            schedule_time: Earliest dispatch time
            oidc_token: OIDC token configuration for authenticated targets
            dispatch_deadline: Deadline for a single dispatch attempt

        Returns:
            The task descriptor

        Raises:
            ValueError: If method is not an HTTP verb Cloud Tasks knows
        """
        if isinstance(method, str):
            try:
                method = tasks_v2.HttpMethod[method.upper()]
            except KeyError as e:
                raise ValueError(f"Unsupported HTTP method: {method}") from e

        http_request = {"url": url, "http_method": method}
        if body is not None:
            http_request["body"] = body
        if headers is not None:
            http_request["headers"] = headers
        if oidc_token is not None:
            http_request["oidc_token"] = oidc_token

        task = {"http_request": tasks_v2.HttpRequest(**http_request)}
        if name is not None:
            task["name"] = name
        if schedule_time is not None:
            task["schedule_time"] = schedule_time
        if dispatch_deadline is not None:
            task["dispatch_deadline"] = dispatch_deadline

        return tasks_v2.Task(**task)


class CloudTaskHelper:
    """Wrapper around the async Cloud Tasks client."""

    def __init__(self, client: tasks_v2.CloudTasksAsyncClient):
        self.client = client

    @classmethod
    def with_credentials(cls, credentials: Optional[Credentials] = None) -> "CloudTaskHelper":
        """
        Create a helper backed by a new CloudTasksAsyncClient.

        Must be called while an event loop is running.
        """
        logger.debug("Creating Cloud Tasks async client")
        return cls(tasks_v2.CloudTasksAsyncClient(credentials=credentials))

    @staticmethod
    def queue_path(project: str, location: str, queue: str) -> str:
        """Build the fully qualified queue name."""
        return f"projects/{project}/locations/{location}/queues/{queue}"

    async def push_task(
        self,
        queue: str,
        task: tasks_v2.Task,
        response_view: Optional[tasks_v2.Task.View] = None,
    ) -> Tuple[tasks_v2.Task, tasks_v2.Task]:
        """
        Enqueue a task.

        Returns as soon as the queue acknowledges the task; dispatch happens
        later on the service side.

        Args:
            queue: Fully qualified queue name (see queue_path)
            task: Task descriptor, usually from TaskHelper.new_task
            response_view: How much of the created task the service returns

        Returns:
            (response, task): the task as created by the service, with name
            and create_time filled in, and the descriptor that was submitted.
            The submitted descriptor is returned as is and never carries
            server-populated fields; read those from response.

        Raises:
            google.api_core.exceptions.NotFound: If the queue does not exist
        """
        request = tasks_v2.CreateTaskRequest(parent=queue, task=task)
        if response_view is not None:
            request.response_view = response_view

        response = await self.client.create_task(request=request)
        logger.info(f"Pushed task {response.name} to {queue}")
        return response, task

    async def push(
        self,
        queue: str,
        url: str,
        method: Union[str, tasks_v2.HttpMethod],
        body: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        name: Optional[str] = None,
        schedule_time: Optional[datetime] = None,
        oidc_token: Optional[tasks_v2.OidcToken] = None,
        dispatch_deadline: Optional[timedelta] = None,
        response_view: Optional[tasks_v2.Task.View] = None,
    ) -> Tuple[tasks_v2.Task, tasks_v2.Task]:
        """Build an HTTP task with TaskHelper.new_task and enqueue it."""
        task = TaskHelper.new_task(
            url,
            method,
            body=body,
            headers=headers,
            name=name,
            schedule_time=schedule_time,
            oidc_token=oidc_token,
            dispatch_deadline=dispatch_deadline,
        )
        return await self.push_task(queue, task, response_view)
