from dataclasses import dataclass


@dataclass(frozen=True)
class RunSettings:
    max_workers: int | None = None
    task_timeout_s: float | None = None


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
