"""Tests for roost.engines — raw passthrough and the compiled-template cache."""

import io
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from kida import Environment
from kida.exceptions import UndefinedError

from roost.engines import MissingKey, RawEngine, TemplateEngine, default_engines
from roost._internal.types import SafeContent
from roost.engines.tpl import INVALID_MARKER
from roost.errors import CompileError, ExecutionError
from roost.fs import MemoryFS
from roost.views import Views


class CountingEnvironment:
    """Delegates to a real kida Environment, counting compiles."""

    def __init__(self) -> None:
        self.env = Environment()
        self.compiles = 0
        self._lock = threading.Lock()

    def from_string(self, source: str):
        with self._lock:
            self.compiles += 1
        return self.env.from_string(source)


class StubTemplate:
    """Renders its whitespace-separated names joined by ``|``.

    Raises kida's ``UndefinedError`` for the first unbound name, the way
    a strict kida template does.
    """

    def __init__(self, names: list[str]) -> None:
        self.names = names

    def render(self, context: dict) -> str:
        for name in self.names:
            if name not in context:
                raise UndefinedError(name, template="stub", lineno=1)
        return "|".join(str(context[name]) for name in self.names)


class StubEnvironment:
    def __init__(self) -> None:
        self.compiles = 0

    def from_string(self, source: str) -> StubTemplate:
        self.compiles += 1
        return StubTemplate(source.split())


class Author:
    def __init__(self, name: str) -> None:
        self.name = name


def _render(views: Views, path: str, variables: dict | None = None) -> str:
    out = io.StringIO()
    views.render_template(path, out, variables)
    return out.getvalue()


class TestRawEngine:
    def test_copies_file(self) -> None:
        views = Views(MemoryFS({"posts/index.txt": "posts index"}), engines={"txt": RawEngine()})
        assert _render(views, "posts/index.txt", {"ignored": 1}) == "posts index"

    def test_non_utf8_file_raises(self) -> None:
        latin = MemoryFS({"latin.txt": "caf\xe9".encode("latin-1")})
        views = Views(latin, engines={"txt": RawEngine()})
        with pytest.raises(UnicodeDecodeError):
            _render(views, "latin.txt")

    def test_missing_file_raises(self) -> None:
        views = Views(MemoryFS(), engines={"txt": RawEngine()})
        with pytest.raises(FileNotFoundError):
            _render(views, "nope.txt")


class TestTemplateEngine:
    def test_renders_variables(self) -> None:
        views = Views(MemoryFS({"test.tpl": "{{ Name }}"}), engines={"tpl": TemplateEngine()})
        assert _render(views, "test.tpl", {"Name": "John"}) == "John"

    def test_helpers_are_visible(self) -> None:
        views = Views(
            MemoryFS({"test.tpl": "{{ site }}: {{ title }}"}),
            engines={"tpl": TemplateEngine()},
            helpers={"site": "Roost", "title": "default"},
        )
        assert _render(views, "test.tpl", {"title": "Home"}) == "Roost: Home"

    def test_autoescapes_variables(self) -> None:
        views = Views(MemoryFS({"test.tpl": "{{ title }}"}), engines={"tpl": TemplateEngine()})
        assert _render(views, "test.tpl", {"title": "<b>"}) == "&lt;b&gt;"

    def test_safe_content_is_not_escaped(self) -> None:
        views = Views(
            MemoryFS({"layout.tpl": "<body>{{ Content }}</body>"}),
            engines={"tpl": TemplateEngine()},
        )
        html = _render(views, "layout.tpl", {"Content": SafeContent("<p>hi</p>")})
        assert html == "<body><p>hi</p></body>"

    def test_caller_content_variable_is_escaped(self) -> None:
        views = Views(
            MemoryFS({"show.tpl": "<body>{{ Content }}</body>"}),
            engines={"tpl": TemplateEngine()},
        )
        html = _render(views, "show.tpl", {"Content": "<script>x</script>"})
        assert html == "<body>&lt;script&gt;x&lt;/script&gt;</body>"

    def test_helper_named_content_is_escaped(self) -> None:
        views = Views(
            MemoryFS({"show.tpl": "{{ Content }}"}),
            engines={"tpl": TemplateEngine()},
            helpers={"Content": "<b>"},
        )
        assert _render(views, "show.tpl") == "&lt;b&gt;"


class TestCompiledTemplateCache:
    def test_compiles_once(self) -> None:
        env = CountingEnvironment()
        engine = TemplateEngine(env=env)
        views = Views(MemoryFS({"test.tpl": "{{ n }}"}), engines={"tpl": engine})

        assert not engine.is_cached("test.tpl")
        outputs = [_render(views, "test.tpl", {"n": i}) for i in range(3)]

        assert outputs == ["0", "1", "2"]
        assert env.compiles == 1
        assert engine.is_cached("test.tpl")

    def test_cached_entry_survives_source_change(self) -> None:
        views = Views(MemoryFS({"test.tpl": "first"}), engines={"tpl": TemplateEngine()})
        assert _render(views, "test.tpl") == "first"

        views = Views(MemoryFS({"test.tpl": "second"}), engines=views.engines)
        assert _render(views, "test.tpl") == "first"

    def test_compile_error_is_not_cached(self) -> None:
        env = CountingEnvironment()
        engine = TemplateEngine(env=env)
        views = Views(MemoryFS({"bad.tpl": "{% if %}"}), engines={"tpl": engine})

        for _ in range(2):
            with pytest.raises(CompileError) as exc_info:
                _render(views, "bad.tpl")
            assert exc_info.value.path == "bad.tpl"
            assert exc_info.value.__cause__ is not None

        assert env.compiles == 2
        assert not engine.is_cached("bad.tpl")

    def test_non_utf8_source_is_compile_error(self) -> None:
        engine = TemplateEngine()
        views = Views(MemoryFS({"latin.tpl": "caf\xe9".encode("latin-1")}), engines={"tpl": engine})

        with pytest.raises(CompileError) as exc_info:
            _render(views, "latin.tpl")
        assert exc_info.value.path == "latin.tpl"
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
        assert not engine.is_cached("latin.tpl")

    def test_read_error_propagates_unwrapped(self) -> None:
        engine = TemplateEngine()
        views = Views(MemoryFS(), engines={"tpl": engine})
        with pytest.raises(FileNotFoundError):
            _render(views, "missing.tpl")
        assert not engine.is_cached("missing.tpl")

    def test_concurrent_first_use(self) -> None:
        env = CountingEnvironment()
        engine = TemplateEngine(env=env)
        views = Views(MemoryFS({"test.tpl": "<p>{{ n }}</p>"}), engines={"tpl": engine})

        with ThreadPoolExecutor(max_workers=8) as pool:
            outputs = list(pool.map(lambda n: _render(views, "test.tpl", {"n": n}), range(64)))

        assert outputs == [f"<p>{n}</p>" for n in range(64)]
        assert 1 <= env.compiles <= 64
        compiles = env.compiles
        _render(views, "test.tpl", {"n": 0})
        assert env.compiles == compiles


class TestMissingKey:
    def _views(self, policy: MissingKey, env: StubEnvironment | None = None) -> Views:
        engine = TemplateEngine(policy, env=env or StubEnvironment())
        return Views(MemoryFS({"greet.tpl": "greeting name"}), engines={"tpl": engine})

    def test_zero(self) -> None:
        assert _render(self._views(MissingKey.ZERO), "greet.tpl", {"greeting": "hi"}) == "hi|"

    def test_invalid(self) -> None:
        views = self._views(MissingKey.INVALID)
        assert _render(views, "greet.tpl", {"greeting": "hi"}) == f"hi|{INVALID_MARKER}"

    def test_zero_fills_every_missing_name(self) -> None:
        assert _render(self._views(MissingKey.ZERO), "greet.tpl") == "|"

    def test_error_keeps_entry_cached(self) -> None:
        env = StubEnvironment()
        views = self._views(MissingKey.ERROR, env)
        engine = views.engines["tpl"]

        with pytest.raises(ExecutionError) as exc_info:
            _render(views, "greet.tpl", {"greeting": "hi"})
        assert exc_info.value.variable == "name"
        assert isinstance(exc_info.value.__cause__, UndefinedError)
        assert engine.is_cached("greet.tpl")

        assert _render(views, "greet.tpl", {"greeting": "hi", "name": "Ann"}) == "hi|Ann"
        assert env.compiles == 1

    def test_fill_does_not_leak_into_caller_variables(self) -> None:
        variables = {"greeting": "hi"}
        _render(self._views(MissingKey.ZERO), "greet.tpl", variables)
        assert variables == {"greeting": "hi"}


class TestMissingKeyWithKida:
    """Missing-key policies against real kida templates."""

    def _render(self, policy: MissingKey, source: str, variables: dict) -> str:
        views = Views(MemoryFS({"t.tpl": source}), engines={"tpl": TemplateEngine(policy)})
        return _render(views, "t.tpl", variables)

    def test_zero_top_level_name(self) -> None:
        html = self._render(MissingKey.ZERO, "{{ greeting }}|{{ name }}", {"greeting": "hi"})
        assert html == "hi|"

    def test_zero_map_key(self) -> None:
        source = "{{ post.title }}|{{ post.body }}"
        assert self._render(MissingKey.ZERO, source, {"post": {"body": "x"}}) == "|x"

    def test_zero_attribute(self) -> None:
        source = "{{ author.nickname }}|{{ author.name }}"
        assert self._render(MissingKey.ZERO, source, {"author": Author("Ann")}) == "|Ann"

    def test_invalid_top_level_name(self) -> None:
        html = self._render(MissingKey.INVALID, "{{ greeting }}|{{ name }}", {"greeting": "hi"})
        assert html == f"hi|{INVALID_MARKER}"

    def test_invalid_map_key(self) -> None:
        source = "{{ post.title }}|{{ post.body }}"
        html = self._render(MissingKey.INVALID, source, {"post": {"body": "x"}})
        assert html == f"{INVALID_MARKER}|x"

    def test_invalid_map_key_inside_list(self) -> None:
        source = "{% for post in posts %}{{ post.title }};{% end %}"
        html = self._render(MissingKey.INVALID, source, {"posts": [{"title": "a"}, {}]})
        assert html == f"a;{INVALID_MARKER};"

    def test_invalid_attribute_raises(self) -> None:
        with pytest.raises(ExecutionError):
            self._render(MissingKey.INVALID, "{{ author.nickname }}", {"author": Author("Ann")})

    def test_invalid_does_not_change_caller_maps(self) -> None:
        post = {"body": "x"}
        self._render(MissingKey.INVALID, "{{ post.title }}", {"post": post})
        assert type(post) is dict
        assert post == {"body": "x"}

    @pytest.mark.parametrize(
        ("source", "variables"),
        [
            ("{{ greeting }}|{{ name }}", {"greeting": "hi"}),
            ("{{ post.title }}", {"post": {"body": "x"}}),
            ("{{ author.nickname }}", {"author": Author("Ann")}),
        ],
        ids=["name", "map-key", "attribute"],
    )
    def test_error(self, source: str, variables: dict) -> None:
        with pytest.raises(ExecutionError) as exc_info:
            self._render(MissingKey.ERROR, source, variables)
        assert isinstance(exc_info.value.__cause__, UndefinedError)


class TestDefaultEngines:
    def test_extensions(self) -> None:
        engines = default_engines()
        assert set(engines) == {"txt", "html", "htm", "xml", "json", "yaml", "js", "tpl"}
        assert isinstance(engines["html"], RawEngine)
        assert isinstance(engines["tpl"], TemplateEngine)

    def test_policy_is_applied(self) -> None:
        engines = default_engines(MissingKey.ERROR)
        assert engines["tpl"].missing_key is MissingKey.ERROR

    def test_fresh_cache_per_call(self) -> None:
        assert default_engines()["tpl"] is not default_engines()["tpl"]
