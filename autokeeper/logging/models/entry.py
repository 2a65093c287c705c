from typing import Any

import msgspec

from .log_level import LogLevel


class Entry(msgspec.Struct, kw_only=True):
    """
    A structured log entry. Subclasses add the fields their component
    logs with and pin `level` with a default.
    """

    message: str | None = None
    level: LogLevel

    def fields(self) -> dict[str, Any]:
        values = msgspec.structs.asdict(self)
        values["level"] = self.level.value

        return values

    def to_template(
        self,
        template: str,
        context: dict[str, Any] | None = None,
    ) -> str:
        """Render through a str.format template; context adds caller info."""
        values = self.fields()

        if context:
            values.update(context)

        return template.format(**values)
