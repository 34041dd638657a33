"""Post-construction lifecycle of container-built objects.

Objects deriving from :class:`LifecycleObject` move through a fixed sequence::

    CONSTRUCTED → AWAKE → STARTED → ENABLED ⇄ DISABLED → DESTROYED

The container drives awake, start and enable right after construction unless
the caller defers it. Enabling and disabling are left to the object's owner,
and destroying is final.
"""

import enum
from typing import Any, Callable, Optional

from fabricant.errors import LifecycleError

__all__ = ["LifecycleState", "LifecycleObject", "LifecycleDriver", "UpdateLoop"]


class LifecycleState(enum.Enum):
    CONSTRUCTED = "constructed"
    AWAKE = "awake"
    STARTED = "started"
    ENABLED = "enabled"
    DISABLED = "disabled"
    DESTROYED = "destroyed"


_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.CONSTRUCTED: frozenset({LifecycleState.AWAKE, LifecycleState.DESTROYED}),
    LifecycleState.AWAKE: frozenset({LifecycleState.STARTED, LifecycleState.DESTROYED}),
    LifecycleState.STARTED: frozenset({LifecycleState.ENABLED, LifecycleState.DISABLED, LifecycleState.DESTROYED}),
    LifecycleState.ENABLED: frozenset({LifecycleState.DISABLED, LifecycleState.DESTROYED}),
    LifecycleState.DISABLED: frozenset({LifecycleState.ENABLED, LifecycleState.DESTROYED}),
    LifecycleState.DESTROYED: frozenset(),
}

UpdateCallback = Callable[[float], None]
Listener = Callable[["LifecycleObject"], None]


class UpdateLoop:
    """Callbacks the host runtime invokes once per tick."""

    def __init__(self):
        self._callbacks: list[UpdateCallback] = []

    def __contains__(self, callback: UpdateCallback) -> bool:
        return callback in self._callbacks

    def __len__(self) -> int:
        return len(self._callbacks)

    def register(self, callback: UpdateCallback):
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister(self, callback: UpdateCallback):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def tick(self, delta: float):
        for callback in list(self._callbacks):
            callback(delta)


class LifecycleObject:
    """Base class for objects with awake/start/update hooks.

    Override :meth:`awake`, :meth:`start` and :meth:`update` as needed. Objects
    that do not override :meth:`update` are never registered with the update
    loop. Listeners added with :meth:`on_enabled`, :meth:`on_disabled` and
    :meth:`on_destroyed` are notified once per transition.

    Subclasses need not call ``super().__init__()``.
    """

    _state = LifecycleState.CONSTRUCTED
    _should_run_update = False
    _update_loop: Optional[UpdateLoop] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_enabled(self) -> bool:
        return self._state is LifecycleState.ENABLED

    @property
    def should_run_update(self) -> bool:
        return self._should_run_update

    def awake(self):
        pass

    def start(self):
        pass

    def update(self, delta: float):
        pass

    def on_enabled(self, listener: Listener):
        self._listeners_for(LifecycleState.ENABLED).append(listener)

    def on_disabled(self, listener: Listener):
        self._listeners_for(LifecycleState.DISABLED).append(listener)

    def on_destroyed(self, listener: Listener):
        self._listeners_for(LifecycleState.DESTROYED).append(listener)

    def enable(self):
        if self._state is LifecycleState.ENABLED:
            return
        self._transition(LifecycleState.ENABLED)
        if self._should_run_update and self._update_loop is not None:
            self._update_loop.register(self.update)
        self._notify(LifecycleState.ENABLED)

    def disable(self):
        if self._state is LifecycleState.DISABLED:
            return
        self._transition(LifecycleState.DISABLED)
        self._unregister_update()
        self._notify(LifecycleState.DISABLED)

    def destroy(self):
        self._transition(LifecycleState.DESTROYED)
        self._unregister_update()
        self._notify(LifecycleState.DESTROYED)

    def _transition(self, target: LifecycleState):
        if target not in _TRANSITIONS[self._state]:
            raise LifecycleError(
                f"{type(self).__qualname__} cannot move from {self._state.value} to {target.value}"
            )
        self._state = target

    def _unregister_update(self):
        if self._update_loop is not None:
            self._update_loop.unregister(self.update)

    def _listeners_for(self, state: LifecycleState) -> list[Listener]:
        listeners = vars(self).setdefault("_listeners", {})
        return listeners.setdefault(state, [])

    def _notify(self, state: LifecycleState):
        for listener in list(self._listeners_for(state)):
            listener(self)


class LifecycleDriver:
    """Advances freshly constructed objects through their lifecycle."""

    def __init__(self, update_loop: UpdateLoop):
        self._update_loop = update_loop

    def prepare(self, instance: Any):
        """Attach the update loop, and skip update registration for types that
        do not override :meth:`LifecycleObject.update`."""
        if not isinstance(instance, LifecycleObject):
            return
        instance._update_loop = self._update_loop
        instance._should_run_update = type(instance).update is not LifecycleObject.update

    def run(self, instance: Any):
        """Run awake, start and enable, in that order, exactly once.

        Raises:
            LifecycleError: If the instance has already left the constructed state.
        """
        if not isinstance(instance, LifecycleObject):
            return
        instance._transition(LifecycleState.AWAKE)
        instance.awake()
        instance._transition(LifecycleState.STARTED)
        instance.start()
        instance.enable()
