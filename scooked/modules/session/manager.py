import asyncio
import logging
from typing import Optional

from ...errors import PersistenceError, SubscriptionError
from ..clock import Clock, SystemClock, TickLoop
from ..retry import RetryExecutor
from ..store import SessionRecord, SessionStoreGateway, Subscription
from .models import (
    DEFAULT_SESSION_DURATION_MS,
    ONE_MINUTE_SECONDS,
    LocalTimerState,
    LogSeverity,
    NullPresenter,
    Presenter,
    SessionState,
    StateChangeReason,
    remaining_seconds,
)

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Session lifecycle manager.

    Owns the local countdown, reconciles remote pushes with it and issues
    retried writes when the user starts or stops a session. All transitions
    run on one event loop; the only suspension points are awaited writes and
    the tick interval.

    The countdown is always re-derived from the absolute end time, so missed
    ticks never skew it, and every observer of the same record converges on
    the same deadline.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        presenter: Optional[Presenter] = None,
        retry: Optional[RetryExecutor] = None,
        duration_ms: int = DEFAULT_SESSION_DURATION_MS,
        tick_interval: float = 1.0,
    ):
        """
        Initialize session manager.

        Args:
            clock: Time source for the countdown and tick loop
            presenter: Receives ticks, state changes and log lines
            retry: Executor wrapping remote writes
            duration_ms: Length of a locally started session
            tick_interval: Seconds between countdown ticks
        """
        if duration_ms <= 0:
            raise ValueError(f"Session duration must be positive, got {duration_ms}")
        self.clock = clock or SystemClock()
        self.presenter = presenter or NullPresenter()
        self.retry = retry or RetryExecutor(self.clock)
        self.duration_ms = duration_ms
        self.tick_interval = tick_interval

        self.timer = LocalTimerState()
        self._state = SessionState.DISCONNECTED
        self._tick_loop: Optional[TickLoop] = None
        self._gateway: Optional[SessionStoreGateway] = None
        self._subscription: Optional[Subscription] = None
        self._pending_clear: Optional[asyncio.Task] = None
        self._last_remaining: Optional[int] = None
        self._minute_notice_sent = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def end_time_ms(self) -> Optional[int]:
        return self.timer.end_time_ms

    @property
    def running(self) -> bool:
        return self.timer.running

    @property
    def online(self) -> bool:
        """Whether a remote store is attached."""
        return self._gateway is not None

    def remaining_seconds(self) -> int:
        if self._state is not SessionState.CONNECTED or self.timer.end_time_ms is None:
            return 0
        return remaining_seconds(self.timer.end_time_ms, self.clock.now_ms())

    # ------------------------------------------------------------------
    # Remote store attachment
    # ------------------------------------------------------------------
    async def attach(self, gateway: SessionStoreGateway) -> bool:
        """
        Attach a remote store and arm the change subscription.

        Writes go to the gateway even when the subscription cannot be armed.

        Returns:
            True if the subscription is live
        """
        await self.detach()
        self._gateway = gateway
        try:
            self._subscription = await gateway.subscribe(self.reconcile, self._on_subscription_error)
        except SubscriptionError as e:
            self.report(f"Session sync unavailable: {e}", LogSeverity.ERROR)
            return False
        return True

    async def detach(self) -> None:
        """Drop the remote store; the local countdown keeps running."""
        subscription, self._subscription = self._subscription, None
        self._gateway = None
        if subscription is not None:
            await subscription.unsubscribe()

    async def close(self) -> None:
        """Tear down the tick loop, any pending remote clear and the subscription."""
        self._teardown()
        clear, self._pending_clear = self._pending_clear, None
        if clear is not None and not clear.done():
            clear.cancel()
            await asyncio.wait([clear])
        if self._state is SessionState.EXPIRING:
            self._state = SessionState.DISCONNECTED
            self.presenter.on_state_change(SessionState.DISCONNECTED, StateChangeReason.EXPIRED)
        await self.detach()

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------
    async def start(self) -> bool:
        """
        Start a session of duration_ms from now.

        The countdown is armed before the write is issued; a failed write
        only produces a warning. Starting while an earlier clear is still
        retrying supersedes that clear.

        Returns:
            False if a session was already running
        """
        if self._state is SessionState.CONNECTED:
            return False

        self.report("Command received: start session.", LogSeverity.INFO)
        started_at = self.clock.now_ms()
        end_time = started_at + self.duration_ms
        self._arm(end_time)
        await self._persist(SessionRecord(end_time=end_time, started_at=started_at))
        return True

    async def stop(self) -> bool:
        """
        Stop the running session early.

        Returns:
            False if no session was running
        """
        if self._state is not SessionState.CONNECTED:
            return False

        self.report("Command received: stop session.", LogSeverity.INFO)
        self._teardown()
        self._state = SessionState.DISCONNECTED
        self.presenter.on_state_change(SessionState.DISCONNECTED, StateChangeReason.USER_STOPPED)
        await self._await_clear(self._schedule_clear())
        self.report("Session stopped by user.", LogSeverity.SUCCESS)
        return True

    on_user_start = start
    on_user_stop = stop

    # ------------------------------------------------------------------
    # Countdown
    # ------------------------------------------------------------------
    async def tick(self) -> bool:
        """
        Advance the countdown.

        Returns:
            True while the session is still running
        """
        if self._state is not SessionState.CONNECTED or self.timer.end_time_ms is None:
            return False

        end_time = self.timer.end_time_ms
        now = self.clock.now_ms()
        if now >= end_time:
            await self._expire()
            return False

        remaining = remaining_seconds(end_time, now)
        self.presenter.on_tick(remaining)
        if (
            not self._minute_notice_sent
            and self._last_remaining is not None
            and self._last_remaining > ONE_MINUTE_SECONDS >= remaining
        ):
            self._minute_notice_sent = True
            self.report("One minute remaining until the session ends.", LogSeverity.WARNING)
        self._last_remaining = remaining
        return True

    async def _expire(self) -> None:
        """
        End the session at its end time.

        The state stays EXPIRING until the remote clear settles, then becomes
        DISCONNECTED. A start or an active push in between supersedes the
        clear.
        """
        self._state = SessionState.EXPIRING
        self._teardown()
        self.presenter.on_tick(0)
        self.presenter.on_state_change(SessionState.EXPIRING, StateChangeReason.EXPIRED)
        self.report("Timer depleted. Session expired.", LogSeverity.WARNING)
        await self._await_clear(self._schedule_clear())

    # ------------------------------------------------------------------
    # Remote pushes
    # ------------------------------------------------------------------
    def reconcile(self, record: Optional[SessionRecord]) -> None:
        """
        Adopt a pushed record as local truth.

        An active record starts a countdown anchored to its absolute end time
        unless one is already running. An absent end time always tears the
        local countdown down.
        """
        end_time = record.end_time if record is not None else None

        if end_time is not None:
            if self._state is SessionState.CONNECTED:
                return
            if end_time <= self.clock.now_ms():
                logger.debug(f"Ignoring stale remote session that ended at {end_time}")
                return
            self.report("Remote session active. Starting countdown.", LogSeverity.NOTICE)
            self._arm(end_time, StateChangeReason.REMOTE_SYNC)
            return

        if self._state is SessionState.CONNECTED:
            self.report("Remote session cleared. Stopping countdown.", LogSeverity.NOTICE)
            self._teardown()
            self._state = SessionState.DISCONNECTED
            self.presenter.on_state_change(SessionState.DISCONNECTED, StateChangeReason.REMOTE_SYNC)

    def _on_subscription_error(self, error: SubscriptionError) -> None:
        self._subscription = None
        self.report(f"Session sync lost: {error}. Continuing with local timer.", LogSeverity.ERROR)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _arm(self, end_time: int, reason: Optional[StateChangeReason] = None) -> None:
        self._teardown()
        self._cancel_pending_clear()

        remaining = remaining_seconds(end_time, self.clock.now_ms())
        self.timer.end_time_ms = end_time
        self._last_remaining = remaining
        self._minute_notice_sent = False
        self._state = SessionState.CONNECTED

        self._tick_loop = TickLoop(self.clock, self.tick, self.tick_interval, name="session-countdown")
        self._tick_loop.start()
        self.timer.running = True

        self.presenter.on_state_change(SessionState.CONNECTED, reason)
        self.presenter.on_tick(remaining)

    def _teardown(self) -> None:
        loop, self._tick_loop = self._tick_loop, None
        if loop is not None:
            loop.cancel()
        self.timer.running = False
        self.timer.end_time_ms = None
        self._last_remaining = None

    async def _persist(self, record: SessionRecord) -> bool:
        gateway = self._gateway
        if gateway is None:
            self.report("Remote store not ready. Skipping remote save.", LogSeverity.WARNING)
            return False
        try:
            await self.retry.run(lambda: gateway.put(record), description="save session")
        except PersistenceError as e:
            self.report(f"Failed to save session: {e}", LogSeverity.WARNING)
            return False
        self.report("Session end time written to remote store.", LogSeverity.SUCCESS)
        return True

    def _schedule_clear(self) -> asyncio.Task:
        self._cancel_pending_clear()
        task = asyncio.get_running_loop().create_task(self._run_clear(), name="session-clear")
        self._pending_clear = task
        return task

    async def _run_clear(self) -> None:
        try:
            await self._clear_remote()
        finally:
            if self._pending_clear is asyncio.current_task():
                self._pending_clear = None
            if self._state is SessionState.EXPIRING:
                self._state = SessionState.DISCONNECTED
                self.presenter.on_state_change(SessionState.DISCONNECTED, StateChangeReason.EXPIRED)

    @staticmethod
    async def _await_clear(task: asyncio.Task) -> None:
        # A superseded or closed clear ends cancelled; the caller carries on.
        await asyncio.wait([task])

    def _cancel_pending_clear(self) -> None:
        clear, self._pending_clear = self._pending_clear, None
        if clear is not None and not clear.done() and clear is not asyncio.current_task():
            clear.cancel()
            logger.info("Pending remote clear superseded")

    async def _clear_remote(self) -> bool:
        gateway = self._gateway
        if gateway is None:
            logger.debug("No remote store attached; nothing to clear")
            return False
        try:
            await self.retry.run(gateway.clear_end_time, description="clear session")
        except PersistenceError as e:
            self.report(f"Failed to clear session data: {e}", LogSeverity.WARNING)
            return False
        self.report("Remote session terminated.", LogSeverity.SUCCESS)
        return True

    def report(self, message: str, severity: LogSeverity) -> None:
        """Emit an operator-visible log line to the logger and the presenter."""
        logger.log(severity.level, message)
        self.presenter.on_log(message, severity)
