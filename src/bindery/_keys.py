from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any


class Token:
    """Opaque symbolic identifier.

    Every instance is a distinct key, even when two tokens share a description:
      CONFIG = Token("config")
      container.register_instance(CONFIG, {...})
    """

    __slots__ = ("description",)

    def __init__(self, description: str = "") -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"Token({self.description!r})"


@dataclass(frozen=True)
class ServiceKey:
    """Normalized registry key.

    `identity` decides equality; `name` is only for messages and logs.
    """

    identity: object
    name: str = field(compare=False)

    def __str__(self) -> str:
        return self.name


if TYPE_CHECKING:
    TokenLike = type[Any] | str | Token | ServiceKey


def normalize_key(token: TokenLike) -> ServiceKey:
    if isinstance(token, ServiceKey):
        return token

    if isinstance(token, str):
        return ServiceKey(token, token)

    if isinstance(token, Token):
        return ServiceKey(token, token.description or repr(token))

    if inspect.isclass(token):
        # Class object is the identity; same-named classes stay distinct.
        return ServiceKey(token, token.__name__)

    msg = f"Unsupported service token: {token!r}. Use a class, a string or a Token."
    raise TypeError(msg)
