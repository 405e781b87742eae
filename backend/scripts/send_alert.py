#!/usr/bin/env python3
"""Send one crisis alert through the dispatch coordinator.

Usage: send_alert.py EMAIL [PHONE ...]
Crisis metadata comes from ALERT_CRISIS_TYPE, ALERT_REGION and ALERT_SEVERITY.
Passing phone numbers enables the SMS channel.
"""

import asyncio
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from crisis_alerts.alerts import AlertCoordinator, build_dispatch_boundary
from crisis_alerts.schemas.alert import CrisisContext


async def main(argv: list[str]) -> int:
    if not argv:
        print(__doc__, file=sys.stderr)
        return 2

    context = CrisisContext(
        crisis_type=os.environ.get("ALERT_CRISIS_TYPE", "drought"),
        region_name=os.environ.get("ALERT_REGION", "Selected Region"),
        severity=os.environ.get("ALERT_SEVERITY", "medium"),
    )
    coordinator = AlertCoordinator(context, build_dispatch_boundary())
    coordinator.forms.set_email_value(argv[0])
    phones = argv[1:]
    if phones:
        coordinator.forms.set_sms_field(sms_enabled=True, phone_numbers=phones)

    outcome = await coordinator.submit(is_online=True)
    print(f"[{outcome.status}] {outcome.notification.title}: {outcome.notification.description}")
    return 0 if outcome.status in ("sent", "partial") else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main(sys.argv[1:])))
