from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import MutableMapping


TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class ContainerLogger(logging.LoggerAdapter):
    """Adapter that prefixes container messages and can be switched off.

    A disabled adapter reports every level as disabled, so records are never
    built or handed to the wrapped logger.
    """

    def __init__(self, logger: logging.Logger, prefix: str, *, enabled: bool = True) -> None:
        super().__init__(logger, {"prefix": prefix})
        self.enabled = enabled

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['prefix']}] {msg}", kwargs

    def isEnabledFor(self, level: int) -> bool:  # noqa: N802
        return self.enabled and self.logger.isEnabledFor(level)

    def trace(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        # skip this frame so records point at the caller
        kwargs["stacklevel"] = kwargs.get("stacklevel", 1) + 1
        self.log(TRACE, msg, *args, **kwargs)
