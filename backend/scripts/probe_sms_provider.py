#!/usr/bin/env python3
"""Ask the dispatch endpoint whether SMS is configured (no messages are sent)."""

import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from crisis_alerts.alerts import AlertCoordinator, SmsProviderStatus, build_dispatch_boundary
from crisis_alerts.schemas.alert import CrisisContext


async def main() -> int:
    status = SmsProviderStatus()
    coordinator = AlertCoordinator(CrisisContext(), build_dispatch_boundary(), on_response=status)
    sms = await coordinator.probe_sms_provider()
    if sms is None:
        print("[probe] Dispatch endpoint unreachable", file=sys.stderr)
        return 1
    print(json.dumps(sms.to_wire(), indent=2))
    if status.banner_text:
        print(f"\n[probe] {status.banner_text}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
