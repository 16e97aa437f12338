"""Common types shared by backend responses."""

from enum import Enum

from pydantic import Field

from .base import KubeconfigBaseModel


class ResultCode(str, Enum):
    """Outcome of a backend command."""

    SUCCESS = "SUCCESS"
    CANCELED = "CANCELED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    SERVER_ERROR = "SERVER_ERROR"
    UNKNOWN = "UNKNOWN"


class CommonResponse(KubeconfigBaseModel):
    """Acknowledgement returned by backend commands without a payload."""

    status: ResultCode = ResultCode.SUCCESS
    message: str = Field(default="", description="Human-readable detail")

    @property
    def ok(self) -> bool:
        return self.status == ResultCode.SUCCESS
