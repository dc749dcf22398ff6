"""Admin templates: packaged pages, host overrides and shared globals."""

from starlette.requests import Request

from entity_admin.core.urls import AdminUrls
from entity_admin.infrastructure.templates import AdminTemplates, build_environment


def test_packaged_templates_are_found():
    env = build_environment()
    for name in ("index.html", "changelist.html", "add.html", "change.html", "error.html"):
        assert env.get_template(name) is not None


def test_host_directory_overrides_packaged_template(tmp_path):
    (tmp_path / "index.html").write_text("custom {{ site_title }}")
    env = build_environment([str(tmp_path)])
    assert env.get_template("index.html").render(site_title="Admin") == "custom Admin"


def test_autoescape_is_enabled(tmp_path):
    (tmp_path / "probe.html").write_text("{{ value }}")
    env = build_environment([str(tmp_path)])
    assert env.get_template("probe.html").render(value="<b>") == "&lt;b&gt;"


def test_render_injects_urls_and_title(tmp_path):
    (tmp_path / "probe.html").write_text("{{ site_title }} {{ urls.index() }}")
    templates = AdminTemplates(AdminUrls("/office"), "Office", [str(tmp_path)])
    request = Request({"type": "http", "method": "GET", "path": "/", "headers": []})
    response = templates.render(request, "probe.html")
    assert response.body == b"Office /office"
