"""JSON Pointer values used to address nodes inside an API description."""

from pydantic import BaseModel, ConfigDict


def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


class JsonPointer(BaseModel):
    """An immutable path of tokens from the document root to a node.

    Pointers are extended by copy, so a pointer stored in a violation is
    never affected by later traversal.
    """

    model_config = ConfigDict(frozen=True)

    tokens: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "JsonPointer":
        """Parse an escaped pointer string such as ``/paths/~1pets/get``."""
        if not text:
            return cls()
        if not text.startswith("/"):
            raise ValueError(f"JSON pointer must start with '/': {text!r}")
        return cls(tokens=tuple(_unescape(t) for t in text[1:].split("/")))

    def plus(self, *tokens: str | int) -> "JsonPointer":
        """Return a new pointer with ``tokens`` appended."""
        return JsonPointer(tokens=self.tokens + tuple(str(t) for t in tokens))

    @property
    def parent(self) -> "JsonPointer":
        return JsonPointer(tokens=self.tokens[:-1])

    def __str__(self) -> str:
        return "".join("/" + _escape(t) for t in self.tokens)


ROOT = JsonPointer()
