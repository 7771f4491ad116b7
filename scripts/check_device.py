"""List the terminal's enrolled users and whether each maps to an employee.

Run before going live: unmapped subjects have their punches dropped.
"""
from __future__ import annotations

from punch_bridge.common.logging_setup import configure_logging
from punch_bridge.container import build_container
from punch_bridge.main import load_settings


def main() -> None:
    settings = load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(settings)
    container.directory_refresher.refresh_once()

    with container.device_factory() as device:
        drift = device.sync_time(max_drift_seconds=float(getattr(settings, "MAX_CLOCK_DRIFT_SECONDS", 5)))
        users = device.users()

    print(f"Device clock drift: {drift:+.1f}s")
    unmapped = 0
    for user in users:
        employee = container.directory.lookup(user.subject_id)
        if employee is None:
            unmapped += 1
            print(f"  {user.subject_id:>8}  {user.name:<30} -> NOT MAPPED")
        else:
            print(f"  {user.subject_id:>8}  {user.name:<30} -> {employee.name} ({employee.employee_id})")
    print(f"{len(users)} users on device, {unmapped} unmapped")


if __name__ == "__main__":
    main()
