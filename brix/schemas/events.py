from __future__ import annotations

from enum import Enum


class EventName(str, Enum):
    """Names of the events emitted by units and containers.

    Unit-local events are mirrored to the unit's container. Container-local
    events stay on the container channel; members only hear about membership
    changes through the sibling notifications.
    """

    # unit-local, mirrored
    run_started = "run-started"
    run_completed = "run-completed"
    run_failed = "run-failed"
    program_registered = "program-registered"
    program_deregistered = "program-deregistered"

    # delivered to member units by their container, not mirrored
    sibling_added = "sibling-added"
    sibling_removed = "sibling-removed"
    demolished = "demolished"

    # container-local
    member_added = "add"
    member_removed = "remove"

