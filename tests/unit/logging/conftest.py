import pytest

from autokeeper.logging import LoggingConfig


@pytest.fixture
def logging_config():
    config = LoggingConfig()
    level = config.level
    output = config.output

    yield config

    config.clear_directory()
    config.update(
        log_level=level.value.lower(),
        log_output=output.value,
        disabled_loggers=[],
    )
