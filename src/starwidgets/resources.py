"""
Resource References

Script and stylesheet locators a scope needs loaded before its import hook
runs. Paths are opaque; the hosting application serves or proxies them.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from fastcore.basics import listify
from fasthtml.common import Link, Script

from .errors import WidgetConstructionError


@dataclass(frozen=True)
class ResourceRef:
    url: str
    kind: str = ""

    def __post_init__(self):
        if not self.kind:
            object.__setattr__(self, 'kind', _guess_kind(self.url))
        if self.kind not in ("js", "css"):
            raise WidgetConstructionError(f"Unsupported resource kind {self.kind!r} for {self.url}")

    @classmethod
    def coerce(cls, value: Union['ResourceRef', str]) -> 'ResourceRef':
        return value if isinstance(value, cls) else cls(str(value))

    def __ft__(self):
        if self.kind == "css":
            return Link(rel="stylesheet", href=self.url, type="text/css")
        return Script(src=self.url)


def _guess_kind(url: str) -> str:
    path = url.split("?", 1)[0].split("#", 1)[0].lower()
    if path.endswith(".css"):
        return "css"
    if path.endswith((".js", ".mjs")):
        return "js"
    return ""


def resource_list(imports: Union[None, str, ResourceRef, Iterable]) -> Tuple[ResourceRef, ...]:
    """Normalize a single locator or a sequence of locators, dropping duplicates."""
    refs = [ResourceRef.coerce(i) for i in listify(imports)]
    return tuple(dict.fromkeys(refs))
