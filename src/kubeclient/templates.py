"""Immutable request templates with named, optionally-omittable placeholders.

A template such as::

    /api/v1/namespaces/{Namespace}/pods?labelSelector={LabelSelector?}&watch={Watch?}

has mandatory placeholders (``{Namespace}``) that must be bound before the URL
can be rendered, and optional ones (``{LabelSelector?}``) whose query parameter
is left out entirely while the value is ``None``. An empty string is a real
value and still renders (``labelSelector=``).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import quote, urlencode

from kubeclient.errors import TemplateError

_PLACEHOLDER_RE = re.compile(r"\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?P<optional>\?)?\}")

# The first "?" that is not the optional marker inside a placeholder.
_QUERY_START_RE = re.compile(r"\?(?![^{]*\})")


@dataclass(frozen=True)
class _Placeholder:
    name: str
    optional: bool


@dataclass(frozen=True)
class _QueryItem:
    key: str
    literal: str | None = None
    placeholder: _Placeholder | None = None


def _parse_placeholder(text: str) -> _Placeholder | None:
    match = _PLACEHOLDER_RE.fullmatch(text)
    if match is None:
        return None
    return _Placeholder(match.group("name"), match.group("optional") is not None)


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class RequestTemplate:
    """A parsed URL template plus the parameter values bound to it so far."""

    template: str
    parameters: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    _path_parts: tuple[str | _Placeholder, ...] = field(init=False, repr=False, compare=False)
    _query: tuple[_QueryItem, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        query_start = _QUERY_START_RE.search(self.template)
        if query_start is None:
            path, query = self.template, ""
        else:
            path, query = self.template[: query_start.start()], self.template[query_start.end() :]

        path_parts: list[str | _Placeholder] = []
        position = 0
        for match in _PLACEHOLDER_RE.finditer(path):
            if match.start() > position:
                path_parts.append(path[position : match.start()])
            if match.group("optional"):
                name = match.group("name")
                msg = f"Optional placeholder {{{name}?}} is not allowed in the path of {self.template!r}."
                raise TemplateError(msg)
            path_parts.append(_Placeholder(match.group("name"), optional=False))
            position = match.end()
        if position < len(path):
            path_parts.append(path[position:])

        query_items: list[_QueryItem] = []
        for pair in filter(None, query.split("&")):
            key, _, raw_value = pair.partition("=")
            placeholder = _parse_placeholder(raw_value)
            if placeholder is not None:
                query_items.append(_QueryItem(key=key, placeholder=placeholder))
            else:
                query_items.append(_QueryItem(key=key, literal=raw_value))

        object.__setattr__(self, "_path_parts", tuple(path_parts))
        object.__setattr__(self, "_query", tuple(query_items))
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @property
    def placeholder_names(self) -> frozenset[str]:
        names = {part.name for part in self._path_parts if isinstance(part, _Placeholder)}
        names.update(item.placeholder.name for item in self._query if item.placeholder is not None)
        return frozenset(names)

    def with_parameters(self, **parameters: Any) -> RequestTemplate:
        """Return a new template with ``parameters`` bound on top of the existing ones.

        Raises:
            TemplateError: If a parameter name does not appear in the template.
        """
        unknown = set(parameters) - self.placeholder_names
        if unknown:
            msg = f"Unknown template parameter(s) {', '.join(sorted(unknown))} for {self.template!r}."
            raise TemplateError(msg)
        merged = dict(self.parameters)
        merged.update(parameters)
        return RequestTemplate(self.template, MappingProxyType(merged))

    def render(self) -> str:
        """Render the bound template to a relative URL (path plus query string).

        Raises:
            TemplateError: If a mandatory placeholder has no value.
        """
        path_segments: list[str] = []
        for part in self._path_parts:
            if isinstance(part, str):
                path_segments.append(part)
            else:
                path_segments.append(quote(_render_value(self._require(part.name)), safe=""))

        query_pairs: list[tuple[str, str]] = []
        for item in self._query:
            if item.placeholder is None:
                query_pairs.append((item.key, item.literal or ""))
                continue
            value = self.parameters.get(item.placeholder.name)
            if value is None:
                if item.placeholder.optional:
                    continue
                value = self._require(item.placeholder.name)
            query_pairs.append((item.key, _render_value(value)))

        url = "".join(path_segments)
        if query_pairs:
            url = f"{url}?{urlencode(query_pairs, quote_via=quote)}"
        return url

    def _require(self, name: str) -> Any:
        value = self.parameters.get(name)
        if value is None:
            msg = f"Template {self.template!r} requires a value for mandatory placeholder {{{name}}}."
            raise TemplateError(msg)
        return value
