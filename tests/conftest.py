"""Shared view tree for resolution and pipeline tests.

Every file renders its own path, so a test can assert which file won
just by reading the output.
"""

import pytest

from roost.engines import RawEngine, TemplateEngine
from roost.fs import MemoryFS
from roost.views import Views

VIEW_PATHS = (
    "application/index.html.tpl",
    "application/_menu.html.tpl",
    "application/about.html.erb",
    "application/about.html.tpl",
    "posts/index.html.tpl",
    "posts/index.json.tpl",
    "posts/index.html+mobile.tpl",
    "admin/posts/index.html.tpl",
    "plugin/admin/authors/index.html.tpl",
)

LAYOUT_PATHS = (
    "layouts/application.html.tpl",
    "layouts/admin/application.html.tpl",
    "layouts/posts.html.tpl",
    "layouts/super.html.tpl",
    "plugin/layouts/secret.html.tpl",
)


def build_files() -> dict[str, str]:
    files = {path: path for path in VIEW_PATHS}
    files.update({path: path + " {{ Content }}" for path in LAYOUT_PATHS})
    files["posts/index.txt"] = "posts index"
    return files


@pytest.fixture
def view_fs() -> MemoryFS:
    return MemoryFS(build_files())


@pytest.fixture
def views(view_fs: MemoryFS) -> Views:
    return Views(
        view_fs,
        engines={"txt": RawEngine(), "tpl": TemplateEngine()},
        search_paths=("", "plugin"),
    )
