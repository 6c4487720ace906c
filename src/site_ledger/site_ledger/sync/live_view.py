from __future__ import annotations

import threading
from typing import Callable, Optional

from ..common.events import Subscription
from ..payroll.model import HistoryReport
from ..payroll.service import WageReportService
from ..places.repository import PlaceRepository
from ..users.model import SessionUser, require_session

ReportListener = Callable[[Optional[HistoryReport]], None]


class LiveWeeklyView:
    """Keeps a place's weekly history report current.

    The listener receives a freshly computed report on open and after every
    change to the place or its records; it receives None once the place is
    gone. Use as a context manager so the subscription is always released::

        with LiveWeeklyView(places, reports, session, place_id, render) as view:
            ...
    """

    def __init__(
        self,
        places: PlaceRepository,
        reports: WageReportService,
        session: SessionUser,
        place_id: str,
        listener: ReportListener,
    ):
        self._places = places
        self._reports = reports
        self._session = require_session(session)
        self._place_id = place_id
        self._listener = listener
        self._subscription: Optional[Subscription] = None
        self._lock = threading.Lock()
        self.latest: Optional[HistoryReport] = None

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def open(self) -> "LiveWeeklyView":
        if self.is_open:
            return self
        self._subscription = self._places.subscribe(
            owner_id=self._session.owner_id,
            place_id=self._place_id,
            callback=self.refresh,
        )
        self.refresh()
        return self

    def refresh(self) -> None:
        with self._lock:
            report = self._reports.build_history_report(self._session, self._place_id)
            self.latest = report
        self._listener(report)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self) -> "LiveWeeklyView":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()
