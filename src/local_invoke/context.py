"""Per-invocation Lambda context"""
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from .config import ACCOUNT_ID, REGION
from .manifest import DEFAULT_TIMEOUT


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class InvocationContext:
    """Mimics the context object AWS passes as a Python handler's second argument"""
    function_name: str
    deadline_ms: int
    aws_request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    function_version: str = "$LATEST"
    memory_limit_in_mb: int = 128
    region: str = REGION

    @property
    def invoked_function_arn(self) -> str:
        return f"arn:aws:lambda:{self.region}:{ACCOUNT_ID}:function:{self.function_name}"

    @property
    def log_group_name(self) -> str:
        return f"/aws/lambda/{self.function_name}"

    @property
    def log_stream_name(self) -> str:
        return f"local/[{self.function_version}]{self.aws_request_id}"

    def get_remaining_time_in_millis(self) -> int:
        """Milliseconds until the deadline, recomputed on every call"""
        return self.deadline_ms - now_ms()


def build_context(function_name: str, timeout: Optional[float] = None,
                  start_ms: Optional[int] = None, region: str = REGION) -> InvocationContext:
    """deadline = start + timeout * 1000; timeout defaults to 6 seconds"""
    if start_ms is None:
        start_ms = now_ms()
    timeout = timeout or DEFAULT_TIMEOUT
    return InvocationContext(
        function_name=function_name,
        deadline_ms=int(start_ms + timeout * 1000),
        region=region,
    )
