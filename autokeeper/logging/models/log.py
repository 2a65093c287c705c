import datetime
import threading
import types

import msgspec

from .entry import Entry


def utc_timestamp() -> str:
    return datetime.datetime.now(datetime.UTC).isoformat()


class Log(msgspec.Struct, kw_only=True):
    """An entry together with where and when it was logged."""

    entry: Entry
    filename: str
    function_name: str
    line_number: int
    thread_id: int = msgspec.field(
        default_factory=threading.get_native_id,
    )
    timestamp: str = msgspec.field(
        default_factory=utc_timestamp,
    )

    @classmethod
    def from_frame(cls, entry: Entry, frame: types.FrameType) -> "Log":
        return cls(
            entry=entry,
            filename=frame.f_code.co_filename,
            function_name=frame.f_code.co_name,
            line_number=frame.f_lineno,
        )

    def context(self) -> dict[str, str | int]:
        """Caller fields for Entry.to_template."""
        return {
            "filename": self.filename,
            "function_name": self.function_name,
            "line_number": self.line_number,
            "thread_id": self.thread_id,
            "timestamp": self.timestamp,
        }
