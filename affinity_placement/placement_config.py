from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from affinity_placement.errors import PlacementConfigConflictError
from affinity_placement.logger import get_logger

_logger = get_logger("placement_config")

DEFAULT_MINIMAL_FREE_DISK_GB = 20
DEFAULT_PRIORITIZED_FREE_DISK_GB = 100

# Node system properties read by the placement engine. Nodes without an
# availability zone all land in UNDEFINED_AVAILABILITY_ZONE.
AVAILABILITY_ZONE_SYSPROP = "availability_zone"
REPLICA_TYPE_SYSPROP = "replica_type"
NODE_TYPE_SYSPROP = "node_type"
SPREAD_DOMAIN_SYSPROP = "spread_domain"
UNDEFINED_AVAILABILITY_ZONE = "uNd3f1NeD"

_MAPPING_FIELDS = ("with_collection", "collection_node_type", "with_collection_shards")

# Attribute name -> key in the persisted document.
DOCUMENT_KEYS: Dict[str, str] = {
    "minimal_free_disk_gb": "minimalFreeDiskGB",
    "prioritized_free_disk_gb": "prioritizedFreeDiskGB",
    "with_collection": "withCollection",
    "collection_node_type": "collectionNodeType",
    "with_collection_shards": "withCollectionShards",
    "spread_across_domains": "spreadAcrossDomains",
    "max_replicas_per_shard_in_domain": "maxReplicasPerShardInDomain",
}


@dataclass(frozen=True)
class PlacementConfig:
    """Tunable parameters of the affinity placement policy.

    Positional construction covers the usual partial parameter sets::

        PlacementConfig()
        PlacementConfig(minimal, prioritized)
        PlacementConfig(minimal, prioritized, with_collection, collection_node_type)
        PlacementConfig(minimal, prioritized, with_collection, collection_node_type,
                        with_collection_shards)

    Positionally the shard-aware map comes last, after ``collection_node_type``,
    not next to ``with_collection``. Callers used to the other order should
    pass the mappings by keyword.

    minimal_free_disk_gb:
        Nodes with strictly less free disk (GB) are excluded from placement.
        Zero or less disables the rule.
    prioritized_free_disk_gb:
        Nodes with at least this much free disk (GB) are preferred over nodes
        below it, regardless of their load.
    with_collection:
        Primary collection -> secondary collection. Replicas of the primary go
        only to nodes already hosting a replica of the secondary.
    collection_node_type:
        Collection -> comma-separated node types. A node must advertise one of
        them in its ``node_type`` system property to host the collection.
    with_collection_shards:
        Like ``with_collection`` but shard N of the primary follows shard N of
        the secondary. Must not share keys with ``with_collection``.
    spread_across_domains:
        Spread replicas of a shard across distinct ``spread_domain`` values.
    max_replicas_per_shard_in_domain:
        Cap on replicas of one shard within one spread domain; -1 is unset.

    Mappings are copied and exposed read-only, and instances hash by value.
    Disjointness is only checked by ``validate()``.
    """

    minimal_free_disk_gb: int = DEFAULT_MINIMAL_FREE_DISK_GB
    prioritized_free_disk_gb: int = DEFAULT_PRIORITIZED_FREE_DISK_GB
    with_collection: Mapping[str, str] = field(default_factory=dict)
    collection_node_type: Mapping[str, str] = field(default_factory=dict)
    with_collection_shards: Mapping[str, str] = field(default_factory=dict)
    spread_across_domains: bool = False
    max_replicas_per_shard_in_domain: int = -1

    def __post_init__(self) -> None:
        for name in _MAPPING_FIELDS:
            if getattr(self, name) is None:
                raise ValueError(f"{name} must not be None")
        for name in _MAPPING_FIELDS:
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def __hash__(self) -> int:
        return hash(
            (
                self.minimal_free_disk_gb,
                self.prioritized_free_disk_gb,
                frozenset(self.with_collection.items()),
                frozenset(self.collection_node_type.items()),
                frozenset(self.with_collection_shards.items()),
                self.spread_across_domains,
                self.max_replicas_per_shard_in_domain,
            )
        )

    def conflicting_collections(self) -> List[str]:
        shard_keys = self.with_collection_shards.keys()
        return [name for name in self.with_collection if name in shard_keys]

    def validate(self) -> None:
        conflicts = self.conflicting_collections()
        if conflicts:
            _logger.warning(
                "placement_config.conflict",
                "Collections are under both withCollection and withCollectionShards",
                collections=",".join(conflicts),
            )
            raise PlacementConfigConflictError(conflicts)
        _logger.debug(
            "placement_config.valid",
            "Placement config is consistent",
            with_collection=len(self.with_collection),
            with_collection_shards=len(self.with_collection_shards),
        )

    def to_document(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {}
        for name, key in DOCUMENT_KEYS.items():
            value = getattr(self, name)
            document[key] = dict(value) if name in _MAPPING_FIELDS else value
        return document


DEFAULT = PlacementConfig(DEFAULT_MINIMAL_FREE_DISK_GB, DEFAULT_PRIORITIZED_FREE_DISK_GB)
