"""RequestView — normalized, read-only request context for matching.

Holds method, scheme, host, port, path, fragment, a case-insensitive header
multimap, a query-parameter multimap and the body. Adapters for concrete
HTTP clients build one of these per request; the engine never parses wire
bytes itself.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

type Pairs = tuple[tuple[str, str], ...]
type MultiMapInput = Mapping[str, str | Iterable[str]] | Iterable[tuple[str, str]] | None


def to_pairs(data: MultiMapInput) -> Pairs:
    """Flatten a mapping or pair iterable into ordered (name, value) pairs.

    Mapping values may be a single string or a sequence of strings. None
    yields an empty multimap.
    """
    if data is None:
        return ()
    if isinstance(data, Mapping):
        pairs: list[tuple[str, str]] = []
        for name, value in data.items():
            if isinstance(value, str | bytes):
                pairs.append((str(name), _text(value)))
            else:
                pairs.extend((str(name), _text(v)) for v in value)
        return tuple(pairs)
    return tuple((str(name), _text(value)) for name, value in data)


def _text(value: object) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _distinct(names: Iterable[str], *, fold: bool) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for name in names:
        key = name.casefold() if fold else name
        if key not in seen:
            seen.add(key)
            out.append(name)
    return tuple(out)


@dataclass(frozen=True, slots=True)
class RequestView:
    """HTTP request context for matching.

    ``port`` is None when the request did not specify one, which is not the
    same as the scheme's default port. ``fragment`` is None when the URL had
    no ``#`` part.

    Headers are compared case-insensitively by name; parameters are
    case-sensitive. Both keep every value in request order.
    """

    method: str = "GET"
    scheme: str = "http"
    host: str = "localhost"
    port: int | None = None
    path: str = "/"
    fragment: str | None = None
    headers: MultiMapInput = ()
    params: MultiMapInput = ()
    body: str | bytes | None = None

    # Computed fields, normalized from headers/params
    _headers: Pairs = field(init=False, repr=False)
    _params: Pairs = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_headers", to_pairs(self.headers))
        object.__setattr__(self, "_params", to_pairs(self.params))

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        *,
        headers: MultiMapInput = None,
        body: str | bytes | None = None,
    ) -> RequestView:
        """Build a view from an absolute URL.

        The query string becomes the parameter multimap (percent-decoded,
        blank values kept). An unparseable port is treated as absent.
        """
        parts = urlsplit(url)
        try:
            port = parts.port
        except ValueError:
            port = None
        return cls(
            method=method.upper(),
            scheme=parts.scheme,
            host=parts.hostname or "",
            port=port,
            path=parts.path or "/",
            fragment=parts.fragment if "#" in url else None,
            headers=headers,
            params=parse_qsl(parts.query, keep_blank_values=True),
            body=body,
        )

    def header_values(self, name: str) -> tuple[str, ...]:
        """All values of a header (case-insensitive name), in request order."""
        key = name.casefold()
        return tuple(v for k, v in self._headers if k.casefold() == key)

    def param_values(self, name: str) -> tuple[str, ...]:
        """All values of a query parameter, in request order."""
        return tuple(v for k, v in self._params if k == name)

    def header_names(self) -> tuple[str, ...]:
        """Distinct header names as first sent."""
        return _distinct((k for k, _ in self._headers), fold=True)

    def param_names(self) -> tuple[str, ...]:
        """Distinct parameter names in request order."""
        return _distinct((k for k, _ in self._params), fold=False)

    @property
    def uri(self) -> str:
        """The request's identifying URI, used in debug output."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        netloc = host if self.port is None else f"{host}:{self.port}"
        query = urlencode(self._params, quote_via=quote)
        return urlunsplit((self.scheme, netloc, self.path, query, self.fragment or ""))
