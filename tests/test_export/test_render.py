"""Tests for catalog rendering."""

import json

from toolwatch.config.categories import CATEGORY_ORDER, OTHER_CATEGORY, ordered_buckets
from toolwatch.export.render import (
    build_catalog,
    group_by_category,
    render_data_file,
    render_readme,
)
from tests.conftest import make_tool

SITE = "https://nologin.tools"
REPO = "nologin-tools/awesome-nologin-tools"


def _catalog():
    tools = [
        make_tool(
            1,
            name="Alpha Draw",
            slug="alpha-draw",
            url="https://alpha.example.com",
            description="Sketch in the browser",
            core_task="Draw diagrams",
            tags=[("category", "Design"), ("platform", "web")],
            is_featured=True,
        ),
        make_tool(
            2,
            name="Beta Chat",
            slug="beta-chat",
            url="https://beta.example.com",
            core_task="Summarize text",
            tags=[("category", "AI")],
            repo_url="https://github.com/beta/chat",
            github_stars=321,
        ),
        make_tool(
            3,
            name="Gamma Notes",
            slug="gamma-notes",
            url="https://gamma.example.com",
            core_task="Take notes",
        ),
        make_tool(
            4,
            name="Delta Paint",
            slug="delta-paint",
            url="https://delta.example.com",
            core_task="Edit images",
            tags=[("category", "Design")],
        ),
    ]
    return build_catalog(tools)


class TestBuildCatalog:

    def test_projects_fields(self):
        entries = _catalog()

        assert [e.slug for e in entries] == ["alpha-draw", "beta-chat", "gamma-notes", "delta-paint"]
        assert entries[0].category == "Design"
        assert entries[0].featured is True
        assert entries[1].repo_url == "https://github.com/beta/chat"
        assert entries[1].github_stars == 321
        assert entries[2].category is None

    def test_empty_repo_url_is_none(self):
        entries = build_catalog([make_tool(1, repo_url="")])
        assert entries[0].repo_url is None


class TestRenderDataFile:

    def test_field_names_and_order(self):
        data = json.loads(render_data_file(_catalog()))

        assert list(data[1].keys()) == [
            "slug",
            "name",
            "url",
            "description",
            "coreTask",
            "category",
            "featured",
            "repoUrl",
            "githubStars",
        ]
        assert data[1]["coreTask"] == "Summarize text"
        assert data[2]["category"] is None

    def test_deterministic(self):
        assert render_data_file(_catalog()) == render_data_file(_catalog())

    def test_two_space_indent(self):
        assert render_data_file(_catalog()).startswith('[\n  {\n    "slug"')

    def test_empty_catalog(self):
        assert render_data_file([]) == "[]"


class TestGroupByCategory:

    def test_canonical_order_with_other_last(self):
        groups = group_by_category(_catalog())

        assert [bucket for bucket, _ in groups] == ["AI", "Design", OTHER_CATEGORY]
        design = dict(groups)["Design"]
        assert [e.slug for e in design] == ["alpha-draw", "delta-paint"]

    def test_unknown_category_goes_to_other(self):
        entries = build_catalog([make_tool(1, tags=[("category", "Astrology")])])
        assert group_by_category(entries)[0][0] == OTHER_CATEGORY

    def test_ordered_buckets_matches_table(self):
        present = set(CATEGORY_ORDER) | {OTHER_CATEGORY}
        assert ordered_buckets(present) == list(CATEGORY_ORDER) + [OTHER_CATEGORY]


class TestRenderReadme:

    def test_sections_in_order(self):
        readme = render_readme(_catalog(), SITE, REPO)

        ai = readme.index("## AI")
        design = readme.index("## Design")
        other = readme.index("## Other")
        license_section = readme.index("## License")
        assert ai < design < other < license_section

    def test_featured_and_repo_metadata(self):
        readme = render_readme(_catalog(), SITE, REPO)

        assert "- **[Alpha Draw ★](https://alpha.example.com)** — Sketch in the browser" in readme
        assert (
            "- **[Beta Chat](https://beta.example.com)** "
            "([Source](https://github.com/beta/chat) ⭐321) — Summarize text"
        ) in readme
        assert "  > _No-login task: Take notes_" in readme

    def test_tool_count_badge(self):
        readme = render_readme(_catalog(), SITE, REPO)
        assert "badge/Tools-4-4c1" in readme

    def test_trailing_slash_on_site(self):
        assert render_readme(_catalog(), SITE + "/", REPO) == render_readme(_catalog(), SITE, REPO)

    def test_deterministic(self):
        assert render_readme(_catalog(), SITE, REPO) == render_readme(_catalog(), SITE, REPO)
