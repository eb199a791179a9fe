from .base import Accepted, FetchOutcome, Provider, RawJob, Rejected, build_record
from .dailyremote import DailyRemoteProvider
from .hackernews import HackerNewsProvider
from .himalayas import HimalayasProvider
from .jobicy import JobicyProvider
from .remoteok import RemoteOKProvider
from .remotive import RemotiveProvider
from .weworkremotely import WeWorkRemotelyProvider
from .workingnomads import WorkingNomadsProvider

# Invocation order of a fetch pass.
PROVIDER_CLASSES: list[type[Provider]] = [
    RemotiveProvider,
    HimalayasProvider,
    JobicyProvider,
    RemoteOKProvider,
    WeWorkRemotelyProvider,
    WorkingNomadsProvider,
    DailyRemoteProvider,
    HackerNewsProvider,
]


def default_providers(**kwargs) -> list[Provider]:
    return [cls(**kwargs) for cls in PROVIDER_CLASSES]


__all__ = [
    "Accepted",
    "FetchOutcome",
    "Provider",
    "RawJob",
    "Rejected",
    "build_record",
    "default_providers",
    "PROVIDER_CLASSES",
]
