"""
Operator commands talking to the monitor. Each returns the text the
command prints.
"""

from autokeeper.keeper.models import NodeRole
from autokeeper.keeper.reconciliation import ReconciliationDriver

from .output import format_coordinator, format_node_table, format_status_line


async def monitor_register(
    driver: ReconciliationDriver,
    role_name: str,
) -> str:
    _, assigned = await driver.register(NodeRole.from_name(role_name))

    return format_status_line(driver.config, assigned)


async def monitor_active(driver: ReconciliationDriver) -> str:
    _, assigned = await driver.report_active()

    return format_status_line(driver.config, assigned)


async def monitor_primary(driver: ReconciliationDriver) -> str:
    primary = await driver.monitor.get_primary(
        driver.config.formation,
        driver.config.group_id,
    )

    return format_node_table([primary])


async def monitor_others(
    driver: ReconciliationDriver,
    role_name: str | None = None,
    json: bool = False,
) -> str:
    role_filter = NodeRole.ANY
    if role_name is not None:
        role_filter = NodeRole.from_name(role_name)

    if json:
        return await driver.monitor.get_others_as_json(
            driver.config.nodename,
            driver.config.pgport,
            role_filter=role_filter,
        )

    others = await driver.monitor.get_others(
        driver.config.nodename,
        driver.config.pgport,
        role_filter=role_filter,
    )

    return format_node_table(others)


async def monitor_coordinator(driver: ReconciliationDriver) -> str:
    coordinator = await driver.monitor.get_coordinator(driver.config.formation)

    return format_coordinator(driver.config.formation, coordinator)


async def monitor_version(driver: ReconciliationDriver) -> str:
    version = await driver.monitor.ensure_extension_version(
        allow_update=driver.config.monitor_update_extension,
    )

    return version.installed_version
