from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Sequence

from botocore.exceptions import ClientError


class SchedulerStub:
    def __init__(self, *, fail_with: Optional[str] = None) -> None:
        self.fail_with = fail_with
        self.created: List[Dict[str, Any]] = []

    def create_schedule(self, **kwargs: Any) -> Dict[str, Any]:
        if self.fail_with:
            raise ClientError({"Error": {"Code": self.fail_with, "Message": "stub"}}, "CreateSchedule")
        self.created.append(kwargs)
        return {"ScheduleArn": f"arn:aws:scheduler:us-east-1:123456789012:schedule/default/{kwargs['Name']}"}


class _Paginator:
    def __init__(self, pages: Sequence[Dict[str, Any]]) -> None:
        self._pages = pages
        self.calls: List[Dict[str, Any]] = []

    def paginate(self, **kwargs: Any) -> Iterator[Dict[str, Any]]:
        self.calls.append(kwargs)
        return iter(self._pages)


class LogsStub:
    """Minimal CloudWatch Logs client: fixed describe pages and scripted delete errors."""

    def __init__(
        self,
        *,
        pages: Optional[Sequence[Dict[str, Any]]] = None,
        delete_errors: Optional[Dict[str, str]] = None,
    ) -> None:
        self.paginator = _Paginator(pages or [])
        self.delete_errors = delete_errors or {}
        self.deleted: List[str] = []

    def get_paginator(self, name: str) -> _Paginator:
        assert name == "describe_log_groups"
        return self.paginator

    def delete_log_group(self, **kwargs: Any) -> Dict[str, Any]:
        name = kwargs["logGroupName"]
        code = self.delete_errors.get(name)
        if code:
            raise ClientError({"Error": {"Code": code, "Message": "stub"}}, "DeleteLogGroup")
        self.deleted.append(name)
        return {}


class SsmStub:
    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self.values = values or {}
        self.calls: List[Dict[str, Any]] = []

    def get_parameter(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(kwargs)
        name = kwargs["Name"]
        if name not in self.values:
            raise ClientError({"Error": {"Code": "ParameterNotFound", "Message": "stub"}}, "GetParameter")
        return {"Parameter": {"Name": name, "Value": self.values[name]}}


class ResponseStub:
    def __init__(self, status_code: int = 200, reason: str = "OK") -> None:
        self.status_code = status_code
        self.reason = reason


class SessionStub:
    """requests.Session stand-in returning scripted responses (or raising) in order."""

    def __init__(self, responses: Optional[Sequence[Any]] = None) -> None:
        self._responses = list(responses or [ResponseStub()])
        self.posts: List[Dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> ResponseStub:
        self.posts.append({"url": url, **kwargs})
        outcome = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class BotoStub:
    def __init__(
        self,
        *,
        logs: Optional[Any] = None,
        scheduler: Optional[Any] = None,
        ssm: Optional[Any] = None,
    ) -> None:
        self._logs = logs
        self._scheduler = scheduler
        self._ssm = ssm

    def client(self, name: str, **kwargs: Any) -> Any:
        if name == "logs" and self._logs is not None:
            return self._logs
        if name == "scheduler" and self._scheduler is not None:
            return self._scheduler
        if name == "ssm" and self._ssm is not None:
            return self._ssm

        # Provide minimal stub for unknown client names
        class _Stub:
            pass

        return _Stub()
