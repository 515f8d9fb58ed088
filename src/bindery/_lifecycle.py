from __future__ import annotations

import abc


class Disposable(abc.ABC):
    """Teardown capability a service opts into.

    Subclass it, or call `Disposable.register(SomeClass)` for classes you do not
    own. `Container.dispose()` awaits `dispose()` on every cached instance that
    is a `Disposable`; everything else is left alone.
    """

    __slots__ = ()

    @abc.abstractmethod
    async def dispose(self) -> None: ...
