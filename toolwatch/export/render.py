"""Render the approved catalog into the two published artifacts.

Both renderers are pure: the same catalog always yields byte-identical
output, which is what makes the content comparison before each write
meaningful.
"""

import json
from collections.abc import Sequence

from toolwatch.config.categories import CATEGORY_TAG_KEY, category_bucket, ordered_buckets
from toolwatch.export.schemas import CatalogEntry
from toolwatch.storage.schemas import Tool

LIST_TITLE = "Awesome NoLogin Tools"


def build_catalog(tools: Sequence[Tool]) -> list[CatalogEntry]:
    """Project tools (with tags loaded) into catalog entries, keeping order."""
    return [
        CatalogEntry(
            slug=tool.slug,
            name=tool.name,
            url=tool.url,
            description=tool.description,
            core_task=tool.core_task,
            category=tool.tag_value(CATEGORY_TAG_KEY),
            featured=tool.is_featured,
            repo_url=tool.repo_url or None,
            github_stars=tool.github_stars,
        )
        for tool in tools
    ]


def render_data_file(entries: Sequence[CatalogEntry]) -> str:
    """Structured data artifact: a JSON array with two-space indentation."""
    return json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False)


def group_by_category(entries: Sequence[CatalogEntry]) -> list[tuple[str, list[CatalogEntry]]]:
    """Group entries into buckets in canonical order, keeping entry order inside."""
    groups: dict[str, list[CatalogEntry]] = {}
    for entry in entries:
        groups.setdefault(category_bucket(entry.category), []).append(entry)
    return [(bucket, groups[bucket]) for bucket in ordered_buckets(set(groups))]


def _render_entry(entry: CatalogEntry) -> str:
    star = " ★" if entry.featured else ""
    repo_suffix = ""
    if entry.repo_url:
        stars = f" ⭐{entry.github_stars}" if entry.github_stars is not None else ""
        repo_suffix = f" ([Source]({entry.repo_url}){stars})"
    summary = entry.description or entry.core_task
    return (
        f"- **[{entry.name}{star}]({entry.url})**{repo_suffix} — {summary}\n"
        f"  > _No-login task: {entry.core_task}_\n"
    )


def render_readme(
    entries: Sequence[CatalogEntry],
    site_url: str,
    repo: str,
) -> str:
    """
    Human-readable listing grouped under category headings.

    Args:
        entries: Catalog entries, already in display order
        site_url: Directory site the listing links back to
        repo: owner/name of the repository hosting the listing
    """
    site_url = site_url.rstrip("/")
    site_label = site_url.split("://", 1)[-1]
    repo_url = f"https://github.com/{repo}"
    repo_name = repo.rsplit("/", 1)[-1]

    lines = [
        f"# {LIST_TITLE}\n\n",
        f"[![Awesome](https://img.shields.io/badge/Awesome-fc60a8?logo=awesomelists&logoColor=white)]({repo_url})\n",
        f"[![Tools](https://img.shields.io/badge/Tools-{len(entries)}-4c1)]({site_url})\n",
        "[![License: CC0](https://img.shields.io/badge/License-CC0_1.0-lightgrey)](https://creativecommons.org/publicdomain/zero/1.0/)\n",
        f"[![Website](https://img.shields.io/badge/{site_label}-Visit-blue)]({site_url})\n",
        f"[![Submit a Tool](https://img.shields.io/badge/Submit_a_Tool-orange)]({site_url}/submit)\n\n",
        f"[![NoLogin Verified]({site_url}/badges/flat.svg)]({site_url}/badge/{repo_name})\n\n",
        "> A curated list of privacy-friendly tools that work without requiring login or registration.\n",
        f"> Auto-generated from [{site_label}]({site_url}).\n\n",
        "## Discover & Submit\n\n",
        f"Browse and search all tools at **[{site_label}]({site_url})**.\n\n",
        f"Know a great tool that works without login? **[Submit it here]({site_url}/submit)**!\n\n",
    ]

    for bucket, bucket_entries in group_by_category(entries):
        lines.append(f"## {bucket}\n\n")
        lines.extend(_render_entry(entry) for entry in bucket_entries)
        lines.append("\n")

    lines.extend([
        "---\n\n",
        "## License\n\n",
        "[![CC0](https://licensebuttons.net/p/zero/1.0/88x31.png)](https://creativecommons.org/publicdomain/zero/1.0/)\n\n",
        "To the extent possible under law, the contributors have waived all copyright "
        "and related or neighboring rights to this work. "
        "See the [LICENSE](LICENSE) file for details.\n\n",
        "---\n\n",
        f"Generated by [{site_label}]({site_url}) · [Submit a tool]({site_url}/submit)\n",
    ])
    return "".join(lines)
