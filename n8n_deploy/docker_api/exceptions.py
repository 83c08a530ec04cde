"""Ошибки обращения к Docker Engine."""

from __future__ import annotations

from n8n_deploy.exceptions import DeployError


class DockerAPIError(DeployError):
    """Обёртка над docker.errors.DockerException с текстом исходной ошибки."""

    def __init__(self, reason: str, *, operation: str = "") -> None:
        self.reason = reason
        self.operation = operation
        prefix = f"{operation}: " if operation else ""
        super().__init__(
            f"Docker API error: {prefix}{reason}",
            context={"operation": operation, "reason": reason},
        )
