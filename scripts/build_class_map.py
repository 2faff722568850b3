import argparse
import asyncio
import json
import logging
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from category_resolver.classmap.builder import ClassMapBuilder
from category_resolver.classmap.static_map import BUNDLED_MAP_PATH
from category_resolver.wiki.sparql_client import SparqlClient


def parse_args():
    parser = argparse.ArgumentParser(
        description="Build the static class -> category map from Wikidata."
    )
    parser.add_argument(
        "--output",
        default=str(BUNDLED_MAP_PATH),
        help="Where to write the JSON artifact (default: bundled data file).",
    )
    parser.add_argument(
        "--supplements",
        help="Optional JSON file of extra {classId: category} entries.",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=0.5,
        help="Seconds to wait between root queries.",
    )
    return parser.parse_args()


async def main():
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    supplements = None
    if args.supplements:
        with open(args.supplements, "r", encoding="utf-8") as f:
            supplements = json.load(f)

    builder = ClassMapBuilder(SparqlClient(), delay=args.delay)
    class_map, stats = await builder.build(supplements=supplements)

    if not len(class_map):
        print("No classes mapped; refusing to overwrite the artifact.")
        sys.exit(1)

    class_map.save(args.output)

    print(f"\nTotal classes mapped: {stats.total_classes}")
    print(f"Supplemented: {stats.supplemented}")
    if stats.failed_roots:
        print(f"Failed roots: {', '.join(stats.failed_roots)}")
    print("\nCategory distribution:")
    for category, count in sorted(stats.by_category.items(), key=lambda kv: -kv[1]):
        print(f"  {category}: {count} classes")
    print(f"\nOutput: {args.output}")

if __name__ == "__main__":
    asyncio.run(main())
