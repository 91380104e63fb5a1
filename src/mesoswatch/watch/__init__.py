"""Registration watch for Mesos agents.

Provides:
- Interval polling of the elected master with cooperative stop
- A bounded wait that resolves to True or False

Example:
    from mesoswatch.cluster import Endpoint
    from mesoswatch.watch import wait_for_registration

    registered = await wait_for_registration(Endpoint("10.0.0.5", 5050), "172.31.34.94")
"""

from mesoswatch.watch.loop import LoopState, PollingLoop, PollMetrics
from mesoswatch.watch.supervisor import RegistrationSupervisor, wait_for_registration

__all__ = [
    "LoopState",
    "PollMetrics",
    "PollingLoop",
    "RegistrationSupervisor",
    "wait_for_registration",
]
