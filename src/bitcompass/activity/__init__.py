"""Activity logs — git analysis for a period and push to the backend."""

from bitcompass.activity.errors import ActivityLogError, InvalidDateError, NotAGitRepositoryError
from bitcompass.activity.log import (
    build_and_push_activity_log,
    build_and_push_activity_log_with_period,
    parse_log_args,
    time_frame_for_range,
)

__all__ = [
    "ActivityLogError",
    "InvalidDateError",
    "NotAGitRepositoryError",
    "build_and_push_activity_log",
    "build_and_push_activity_log_with_period",
    "parse_log_args",
    "time_frame_for_range",
]
