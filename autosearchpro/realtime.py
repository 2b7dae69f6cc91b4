from __future__ import annotations

from typing import Callable, Optional

from autosearchpro.store import ChangeEvent, RowStore

STATUS_PROCESSED = "processed"
STATUS_FAILED = "failed"


class JobUpdateSubscription:
    """
    Watches one job posting for processing updates.

    Owns its subscription handle and last-seen state; nothing is module-global.
    Lifecycle: start(job_id) ... stop(). Starting again switches to the new job.
    """

    def __init__(
            self,
            store: RowStore,
            *,
            on_processed: Callable[[str, str], None],
            on_failed: Callable[[Optional[str]], None],
    ) -> None:
        self._store = store
        self._on_processed = on_processed
        self._on_failed = on_failed
        self._handle: Optional[int] = None
        self._job_id: Optional[str] = None
        self._last_state: Optional[str] = None

    @property
    def active(self) -> bool:
        return self._handle is not None

    @property
    def job_id(self) -> Optional[str]:
        return self._job_id

    def start(self, job_id: str) -> None:
        if not job_id:
            raise ValueError("job_id must not be empty")
        if self.active and job_id == self._job_id:
            return
        self.stop()
        self._job_id = job_id
        self._last_state = None
        self._handle = self._store.subscribe(
            "job_postings",
            self._handle_change,
            filter_column="id",
            filter_value=job_id,
        )

    def stop(self) -> None:
        if self._handle is not None:
            self._store.unsubscribe(self._handle)
        self._handle = None
        self._job_id = None
        self._last_state = None

    def _handle_change(self, event: ChangeEvent) -> None:
        posting = event.new
        if not posting or posting.get("id") != self._job_id:
            return

        status = posting.get("status")
        processed_at = posting.get("processed_at") or ""
        state = f"{status}-{processed_at}"
        if state == self._last_state:
            return
        self._last_state = state

        if status == STATUS_PROCESSED:
            self._on_processed(posting["id"], processed_at)
        elif status == STATUS_FAILED:
            self._on_failed(posting.get("description"))
