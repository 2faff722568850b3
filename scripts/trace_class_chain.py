import argparse
import asyncio
import logging
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from category_resolver.classmap.static_map import StaticClassMap
from category_resolver.resolvers.base import ResolutionContext
from category_resolver.resolvers.walker import SubclassChainWalker
from category_resolver.wiki.wikidata_client import WikidataClient


def print_tree(class_id, context, class_map, depth=0, seen=None):
    seen = seen if seen is not None else set()
    if class_id in seen:
        print("  " * depth + f"{class_id} (already shown)")
        return
    seen.add(class_id)

    mapped = class_map.lookup(class_id)
    suffix = f" -> {mapped.value}" if mapped else ""
    print("  " * depth + f"{class_id}{suffix}")
    if mapped and depth:
        return
    for parent in context.parents.get(class_id, []):
        print_tree(parent, context, class_map, depth + 1, seen)


async def main():
    parser = argparse.ArgumentParser(
        description="Show the subclass-of chain explored for a Wikidata class."
    )
    parser.add_argument("class_id", help="Wikidata class id, e.g. Q183770")
    parser.add_argument("--depth", type=int, default=None, help="Override the walk depth.")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    class_map = StaticClassMap.load()
    walker = SubclassChainWalker(
        class_map,
        WikidataClient().get_subclass_parents,
        max_depth=args.depth,
    )
    context = ResolutionContext()
    match = await walker.walk(args.class_id, context)

    print(f"=== Subclass chain for {args.class_id} (max depth {walker.max_depth}) ===\n")
    print_tree(args.class_id, context, class_map)
    print()
    if match:
        print(f"Mapped ancestor: {match.class_id} -> {match.category.value} at depth {match.depth}")
    else:
        print("No mapped ancestor within the depth bound.")
    print(f"Parent fetches: {context.parent_fetches}")

if __name__ == "__main__":
    asyncio.run(main())
