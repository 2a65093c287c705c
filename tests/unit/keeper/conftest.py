import pytest

from autokeeper.keeper.config import KeeperConfig
from autokeeper.keeper.fsm import TransitionEngine
from autokeeper.keeper.models import InstanceFacts
from autokeeper.keeper.monitor import MonitorClient
from autokeeper.keeper.reconciliation import ReconciliationDriver
from autokeeper.keeper.state import StateStore
from autokeeper.logging import LoggingConfig

from tests.unit.keeper.mocks import (
    MockInstanceActions,
    MockProbe,
    MockTransport,
    RecordingLogger,
)


@pytest.fixture(autouse=True)
def configure_log_level():
    config = LoggingConfig()
    config.update(log_level="error")
    yield
    config.clear_directory()


@pytest.fixture
def state_path(tmp_path) -> str:
    return str(tmp_path / "state" / "keeper.state")


@pytest.fixture
def store(state_path: str) -> StateStore:
    return StateStore(state_path)


@pytest.fixture
def actions() -> MockInstanceActions:
    return MockInstanceActions()


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def probe() -> MockProbe:
    return MockProbe(
        facts=InstanceFacts(
            pgdata_exists=True,
            is_running=True,
            current_lsn="0/3000060",
            sync_state="async",
        )
    )


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def keeper_config(tmp_path) -> KeeperConfig:
    return KeeperConfig(
        pgdata=str(tmp_path / "pgdata"),
        pgport=5433,
        nodename="node-a",
        formation="default",
        group_id=0,
        monitor_uri="postgresql://autoctl@monitor:5432/pg_auto_failover",
        state_directory=str(tmp_path / "state"),
    )


@pytest.fixture
def driver(
    keeper_config: KeeperConfig,
    state_path: str,
    actions: MockInstanceActions,
    transport: MockTransport,
    probe: MockProbe,
    recording_logger: RecordingLogger,
) -> ReconciliationDriver:
    return ReconciliationDriver(
        config=keeper_config,
        store=StateStore(state_path, logger=recording_logger),
        engine=TransitionEngine(actions, logger=recording_logger),
        probe=probe,
        monitor=MonitorClient(transport, timeout=1.0, logger=recording_logger),
        logger=recording_logger,
    )


@pytest.fixture
def offline_driver(
    keeper_config: KeeperConfig,
    state_path: str,
    actions: MockInstanceActions,
    probe: MockProbe,
    recording_logger: RecordingLogger,
) -> ReconciliationDriver:
    return ReconciliationDriver(
        config=keeper_config.model_copy(update={"monitor_uri": None}),
        store=StateStore(state_path, logger=recording_logger),
        engine=TransitionEngine(actions, logger=recording_logger),
        probe=probe,
        monitor=None,
        logger=recording_logger,
    )
