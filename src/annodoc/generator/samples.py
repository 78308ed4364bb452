"""Code samples shown in the language tabs of each operation."""

import json
from functools import partial
from typing import Callable
from urllib.parse import urlencode

from annodoc.errors import ConfigError
from annodoc.generator.route import PATH_VARIABLE_RE
from annodoc.parser.base import RouteDescriptor

SampleRenderer = Callable[[RouteDescriptor], str]


def _url(route: RouteDescriptor, base_url: str) -> str:
    def substitute(match):
        param = route.parameters.get(match.group(1))
        return str(param.value) if param is not None else match.group(0)

    return f"{base_url}/{PATH_VARIABLE_RE.sub(substitute, route.uri.lstrip('/'))}"


def _query(route: RouteDescriptor) -> dict:
    return {p.name: p.value for p in route.parameters.values() if p.location == "query"}


def _body(route: RouteDescriptor) -> dict:
    return {p.name: p.value for p in route.body_parameters.values()}


def _headers(route: RouteDescriptor) -> dict:
    return {"Content-Type": "application/json", "Accept": "application/json", **route.headers}


def _dumps(value, indent: int | None = 4) -> str:
    return json.dumps(value, indent=indent, default=str)


def render_bash(route: RouteDescriptor, base_url: str) -> str:
    url = _url(route, base_url)
    query = _query(route)
    if query:
        url = f"{url}?{urlencode({k: v if isinstance(v, str) else _dumps(v, None) for k, v in query.items()})}"

    lines = [f'curl -X {route.methods[0]} "{url}"']
    lines += [f'-H "{name}: {value}"' for name, value in _headers(route).items()]
    body = _body(route)
    if body:
        lines.append(f"-d '{_dumps(body, None)}'")
    return " \\\n    ".join(lines)


def render_python(route: RouteDescriptor, base_url: str) -> str:
    parts = ["import requests", "", f"url = {_dumps(_url(route, base_url))}"]
    args = ["headers=headers"]

    query = _query(route)
    if query:
        parts.append(f"params = {_dumps(query)}")
        args.append("params=params")
    body = _body(route)
    if body:
        parts.append(f"payload = {_dumps(body)}")
        args.append("json=payload")

    parts += [
        f"headers = {_dumps(_headers(route))}",
        f"response = requests.request({_dumps(route.methods[0])}, url, {', '.join(args)})",
        "print(response.json())",
    ]
    return "\n".join(parts)


def render_javascript(route: RouteDescriptor, base_url: str) -> str:
    parts = [f"const url = new URL({_dumps(_url(route, base_url))});"]

    query = _query(route)
    if query:
        parts += [
            f"let params = {_dumps(query)};",
            "Object.keys(params).forEach(key => url.searchParams.append(key, params[key]));",
        ]
    parts.append(f"let headers = {_dumps(_headers(route))};")

    options = [f"method: {_dumps(route.methods[0])}", "headers: headers"]
    body = _body(route)
    if body:
        parts.append(f"let body = {_dumps(body)};")
        options.append("body: JSON.stringify(body)")

    parts += [
        "",
        f"fetch(url, {{{', '.join(options)}}})",
        "    .then(response => response.json())",
        "    .then(json => console.log(json));",
    ]
    return "\n".join(parts)


RENDERERS = {
    "bash": render_bash,
    "python": render_python,
    "javascript": render_javascript,
}


def build_sample_renderers(language_tabs: dict[str, str], base_url: str) -> dict[str, SampleRenderer]:
    """Bind a renderer to each configured language tab, keyed by display name."""
    renderers = {}
    for lang, name in language_tabs.items():
        if lang not in RENDERERS:
            raise ConfigError(f"no code sample renderer for language {lang!r}")
        renderers[name] = partial(RENDERERS[lang], base_url=base_url)
    return renderers
