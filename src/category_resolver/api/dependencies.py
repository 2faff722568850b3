from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..classmap.static_map import StaticClassMap
from ..core.titles import TargetAliases
from ..db import CacheStore, get_async_session
from ..resolvers.direct import DirectResolver
from ..resolvers.entity import EntityResolver
from ..resolvers.keywords import KeywordResolver
from ..resolvers.orchestrator import ResolutionCache, ResolutionOrchestrator
from ..resolvers.walker import SubclassChainResolver, SubclassChainWalker
from ..wiki.wikidata_client import WikidataClient
from ..wiki.wikipedia_client import WikipediaClient


@lru_cache
def get_class_map() -> StaticClassMap:
    return StaticClassMap.load()

@lru_cache
def get_wikipedia_client() -> WikipediaClient:
    return WikipediaClient()

@lru_cache
def get_wikidata_client() -> WikidataClient:
    return WikidataClient()

@lru_cache
def get_target_aliases() -> TargetAliases:
    return TargetAliases(settings.target_aliases)

def get_cache_store(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> CacheStore:
    return CacheStore(session)


def build_orchestrator(
    class_map: StaticClassMap,
    wikipedia: WikipediaClient,
    wikidata: WikidataClient,
    cache: ResolutionCache,
    aliases: TargetAliases,
) -> ResolutionOrchestrator:
    """Wire the resolver chain: direct, then subclass walk, then keywords."""
    walker = SubclassChainWalker(class_map, wikidata.get_subclass_parents)
    return ResolutionOrchestrator(
        entities=EntityResolver(wikipedia, wikidata),
        cache=cache,
        resolvers=[
            DirectResolver(class_map),
            SubclassChainResolver(walker, class_map),
            KeywordResolver(wikipedia.get_topic_tags),
        ],
        target_aliases=aliases,
        max_titles=settings.max_titles_per_request,
    )


def get_orchestrator(
    class_map: Annotated[StaticClassMap, Depends(get_class_map)],
    wikipedia: Annotated[WikipediaClient, Depends(get_wikipedia_client)],
    wikidata: Annotated[WikidataClient, Depends(get_wikidata_client)],
    cache: Annotated[CacheStore, Depends(get_cache_store)],
    aliases: Annotated[TargetAliases, Depends(get_target_aliases)],
) -> ResolutionOrchestrator:
    return build_orchestrator(class_map, wikipedia, wikidata, cache, aliases)
