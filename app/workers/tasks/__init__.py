from app.workers.tasks.outbox_dispatch import (
    dispatch_outbox_events,
    purge_dispatched_outbox_events,
)

__all__ = [
    "dispatch_outbox_events",
    "purge_dispatched_outbox_events",
]
