from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class MonitorExtensionVersion:
    default_version: str
    installed_version: str

    @property
    def is_current(self) -> bool:
        return self.default_version == self.installed_version
