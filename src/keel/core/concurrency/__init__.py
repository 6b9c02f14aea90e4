"""Asyncio control-flow primitives.

Manifesto:
    A handful of timing patterns come up in every service: "run this every
    N seconds, but never overlap", "give up on this after N seconds", "do
    these one after another", "tell me when the server is actually up".
    Each hides a race (double settlement, a leaked timer, overlapping runs)
    that is easy to get subtly wrong, so they live here once.

Architecture::

    interval.py    RepeatingTask, set_interval(), clear_interval()
    timeout.py     GuardedOperation, with_timeout(), delay()
    sequence.py    run_sequentially()
    listen.py      promisify_listen()

    The primitives are independent; compose them freely, e.g. a
    RepeatingTask whose work wraps each call in with_timeout().

Tags:
    keel-core, asyncio, concurrency, timers, cancellation

Doc-Types:
    package-overview, module-index
"""

from keel.core.concurrency.interval import (
    RepeatingTask,
    WorkFunction,
    clear_interval,
    set_interval,
)
from keel.core.concurrency.listen import (
    ERROR_EVENT,
    LISTENING_EVENT,
    promisify_listen,
)
from keel.core.concurrency.sequence import SequenceItem, run_sequentially
from keel.core.concurrency.timeout import (
    DEFAULT_TIMEOUT_MESSAGE,
    GuardedOperation,
    delay,
    with_timeout,
)

__all__ = [
    # interval
    "RepeatingTask",
    "WorkFunction",
    "set_interval",
    "clear_interval",
    # timeout
    "DEFAULT_TIMEOUT_MESSAGE",
    "GuardedOperation",
    "with_timeout",
    "delay",
    # sequence
    "SequenceItem",
    "run_sequentially",
    # listen
    "ERROR_EVENT",
    "LISTENING_EVENT",
    "promisify_listen",
]
