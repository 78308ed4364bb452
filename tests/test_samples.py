import pytest

from annodoc.errors import ConfigError
from annodoc.generator.samples import (
    build_sample_renderers,
    render_bash,
    render_javascript,
    render_python,
)
from annodoc.parser.base import ParameterDescriptor, RouteDescriptor

BASE_URL = "https://api.test"


def _route(**overrides) -> RouteDescriptor:
    defaults = dict(
        id="x",
        group="Users",
        title="update",
        description="",
        methods=["PUT"],
        uri="users/{id}",
        parameters={
            "id": ParameterDescriptor(name="id", type="integer", location="path", required=True, value=7),
            "page": ParameterDescriptor(name="page", type="integer", location="query", value=2),
        },
        body_parameters={"name": ParameterDescriptor(name="name", value="Jane")},
        authenticated=True,
        responses={},
        headers={"Authorization": "Bearer t"},
    )
    defaults.update(overrides)
    return RouteDescriptor(**defaults)


class TestRenderBash:
    def test_curl_command(self):
        source = render_bash(_route(), BASE_URL)
        assert source.startswith('curl -X PUT "https://api.test/users/7?page=2"')
        assert '-H "Authorization: Bearer t"' in source
        assert '-d \'{"name": "Jane"}\'' in source

    def test_without_query_or_body(self):
        source = render_bash(_route(methods=["GET"], parameters={}, body_parameters={}, uri="health"), BASE_URL)
        assert source.startswith('curl -X GET "https://api.test/health"')
        assert "-d" not in source


class TestRenderPython:
    def test_requests_call(self):
        source = render_python(_route(), BASE_URL)
        assert 'url = "https://api.test/users/7"' in source
        assert '"page": 2' in source
        assert 'requests.request("PUT", url, headers=headers, params=params, json=payload)' in source

    def test_without_body(self):
        source = render_python(_route(body_parameters={}), BASE_URL)
        assert "json=payload" not in source


class TestRenderJavascript:
    def test_fetch_call(self):
        source = render_javascript(_route(), BASE_URL)
        assert 'const url = new URL("https://api.test/users/7");' in source
        assert "url.searchParams.append" in source
        assert 'fetch(url, {method: "PUT", headers: headers, body: JSON.stringify(body)})' in source


class TestBuildSampleRenderers:
    def test_keyed_by_display_name(self):
        renderers = build_sample_renderers({"bash": "Shell", "python": "Python"}, BASE_URL)
        assert list(renderers) == ["Shell", "Python"]
        assert renderers["Shell"](_route()).startswith("curl -X PUT")

    def test_unknown_language(self):
        with pytest.raises(ConfigError):
            build_sample_renderers({"cobol": "COBOL"}, BASE_URL)
