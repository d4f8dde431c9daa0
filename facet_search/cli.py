# facet_search/cli.py
"""
Batch runner for the resource dashboard.
Evaluates one dashboard URL against a catalog snapshot without starting FastAPI.

- Facets that live outside the URL (levels, languages) come from flags
- Prints the requested page, or writes the full sorted result to a CSV
- The CSV keeps the sorted order and carries the resource columns as-is
"""

from __future__ import annotations
import argparse
from pathlib import Path
from typing import List, Optional

import pandas as pd
from loguru import logger

from facet_search.catalog_build import load_catalog_snapshot
from facet_search.config import (
    DEFAULT_ITEMS_PER_PAGE,
    DEFAULT_SORT,
    RESOURCES_BASE_PATH,
    SORT_OPTIONS,
    Resource,
)
from facet_search.controller import FilterStateController


def write_resources_csv(resources: List[Resource], out_path: Path) -> None:
    """One row per resource, in the order given."""
    columns = list(Resource.model_fields)
    df = pd.DataFrame([r.model_dump() for r in resources], columns=columns)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path, index=False)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Evaluate a dashboard URL against a catalog snapshot")
    ap.add_argument("--snapshot", type=str, default=None, help="JSON file or directory of CSV tables")
    ap.add_argument("--url", type=str, default=RESOURCES_BASE_PATH, help="dashboard URL, e.g. /zasoby/matematyka?q=algebra")
    ap.add_argument("--level", action="append", default=[], help="level id (repeatable)")
    ap.add_argument("--language", action="append", default=[], help="language code (repeatable)")
    ap.add_argument("--sort", choices=SORT_OPTIONS, default=DEFAULT_SORT)
    ap.add_argument("--page", type=int, default=1)
    ap.add_argument("--page-size", dest="page_size", type=int, default=DEFAULT_ITEMS_PER_PAGE)
    ap.add_argument("--no-subtopics", dest="include_subtopics", action="store_false", help="match selected topics only")
    ap.add_argument("--out", dest="out", type=str, default=None, help="write every matching resource to this CSV")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    snapshot = load_catalog_snapshot(Path(args.snapshot) if args.snapshot else None)
    controller = FilterStateController(
        resources=snapshot.resources,
        subjects=snapshot.subjects,
        topics=snapshot.topics,
        levels=snapshot.levels,
        resource_topics=snapshot.resource_topics,
        resource_levels=snapshot.resource_levels,
        articles=snapshot.articles,
        url=args.url,
        selected_levels=args.level,
        selected_languages=args.language,
        page=args.page,
        page_size=args.page_size,
        sort_by=args.sort,
        include_subtopics=args.include_subtopics,
    )
    view = controller.view
    logger.info("Evaluated {} -> {} matching resources", view.url, view.page.total_items)

    if args.out:
        out = Path(args.out)
        write_resources_csv(controller.sorted_resources, out)
        print(f"Wrote {len(controller.sorted_resources)} rows to {out}")
        return 0

    page = view.page
    if not page.total_items:
        print("No resources match.")
        return 0
    print(f"Page {page.page}/{page.total_pages} ({page.start_index + 1}-{page.end_index} of {page.total_items})")
    for resource in page.items:
        print(f"- {resource.title} [{resource.id}]")
    if view.articles:
        print("Related articles:")
        for article in view.articles:
            print(f"- {article.title} ({article.slug})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
