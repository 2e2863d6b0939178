"""Textual integration for reactree. Opt-in — requires textual.

Textual owns the tick: drive() drains pending reactions on an interval timer
and routes background-thread writes through app.call_from_thread. Guarded
effects skip their run while the widget tree is not queryable and are
re-queued once it is.
"""

import logging
from contextlib import contextmanager

from textual.css.query import NoMatches

from reactree import _anchor
from reactree._tracking import drain_pending
from reactree.errors import UnboundedDirtyingCycle
from reactree.mutable import set_dispatcher
from reactree.reaction import create_effect as _create_effect

logger = logging.getLogger("reactree.textual")

# Module-owned pause state — keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()

# Guarded reactions that skipped a run while their app was unsafe.
_deferred: dict[int, list] = {}


@contextmanager
def pause(app):
    """Suspend guarded effects during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)
        if is_safe(app):
            _requeue(app)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _requeue(app) -> None:
    for reaction in _deferred.pop(id(app), ()):
        if reaction.alive:
            reaction.invalidate()


def create_effect(app, owner, action):
    """create_effect() that safely bridges to Textual widgets.

    While the app is paused or not running, the run is skipped and the
    reaction is queued again once the app is safe. NoMatches from widget
    queries is tolerated.
    """

    def _guarded(cx):
        if not is_safe(app):
            deferred = _deferred.setdefault(id(app), [])
            if cx.owner not in deferred:
                deferred.append(cx.owner)
            return
        try:
            action(cx)
        except NoMatches:
            logger.debug("Effect %r found no widget to update", cx.owner)

    reaction = _create_effect(owner, _guarded)
    reaction.on_destroy(lambda: _forget(app, reaction))
    return reaction


def _forget(app, reaction) -> None:
    deferred = _deferred.get(id(app))
    if deferred is None:
        return
    if reaction in deferred:
        deferred.remove(reaction)
    if not deferred:
        del _deferred[id(app)]


def drive(app, interval: float = 1 / 60):
    """Drain pending reactions every interval seconds on the app's thread.

    Call from the app's thread, typically in on_mount. Returns the Textual
    timer; stop it to stop driving.
    """
    set_dispatcher(app.call_from_thread)

    def _tick():
        if not is_safe(app):
            return
        _requeue(app)
        if not _anchor.pending:
            return
        try:
            drain_pending()
        except UnboundedDirtyingCycle as exc:
            logger.error("Drain pass aborted: %s", exc)
            app.notify(str(exc), title="reactree", severity="error")

    return app.set_interval(interval, _tick)
