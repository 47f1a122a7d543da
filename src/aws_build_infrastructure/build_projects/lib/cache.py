from enum import StrEnum
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from troposphere import Join
from troposphere import NoValue
from troposphere import codebuild

from aws_build_infrastructure.templates.lib import TemplateValue


class CacheMode(StrEnum):
    CUSTOM_CACHE = "LOCAL_CUSTOM_CACHE"
    DOCKER_LAYER_CACHE = "LOCAL_DOCKER_LAYER_CACHE"
    SOURCE_CACHE = "LOCAL_SOURCE_CACHE"


class NoCache(BaseModel):
    type: Literal["NO_CACHE"] = "NO_CACHE"

    model_config = ConfigDict(frozen=True)


class S3Cache(BaseModel):
    type: Literal["S3"] = "S3"
    bucket: TemplateValue
    cache_dir: str | None = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class LocalCache(BaseModel):
    type: Literal["LOCAL"] = "LOCAL"
    modes: tuple[CacheMode, ...]

    model_config = ConfigDict(frozen=True)


type ResolvedCache = NoCache | S3Cache | LocalCache


def resolve_cache(
    *, cache_bucket: TemplateValue | None, cache_dir: str | None, cache_modes: list[CacheMode] | None
) -> ResolvedCache:
    """Pick the cache variant. Callers must already have rejected setting both a bucket and modes."""
    if cache_bucket is not None:
        return S3Cache(bucket=cache_bucket, cache_dir=cache_dir)
    if cache_modes:
        return LocalCache(modes=tuple(cache_modes))
    return NoCache()


def render_cache(cache: ResolvedCache) -> codebuild.ProjectCache | None:
    match cache:
        case NoCache():
            return None
        case S3Cache():
            return codebuild.ProjectCache(
                Type=cache.type,
                Location=Join("/", [cache.bucket, cache.cache_dir if cache.cache_dir is not None else NoValue]),
            )
        case LocalCache():
            return codebuild.ProjectCache(Type=cache.type, Modes=[str(mode) for mode in cache.modes])
