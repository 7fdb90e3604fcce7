from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt

from affinity_placement.placement_config import (
    DEFAULT_MINIMAL_FREE_DISK_GB,
    DEFAULT_PRIORITIZED_FREE_DISK_GB,
    PlacementConfig,
)


class _PlacementConfigFields(BaseModel):
    minimal_free_disk_gb: StrictInt = Field(
        default=DEFAULT_MINIMAL_FREE_DISK_GB, alias="minimalFreeDiskGB"
    )
    prioritized_free_disk_gb: StrictInt = Field(
        default=DEFAULT_PRIORITIZED_FREE_DISK_GB, alias="prioritizedFreeDiskGB"
    )
    with_collection: Dict[str, str] = Field(default_factory=dict, alias="withCollection")
    collection_node_type: Dict[str, str] = Field(default_factory=dict, alias="collectionNodeType")
    with_collection_shards: Dict[str, str] = Field(
        default_factory=dict, alias="withCollectionShards"
    )
    spread_across_domains: StrictBool = Field(default=False, alias="spreadAcrossDomains")
    max_replicas_per_shard_in_domain: StrictInt = Field(default=-1, alias="maxReplicasPerShardInDomain")


class PlacementConfigPayload(_PlacementConfigFields):
    """Persisted document form of a placement config, keyed as stored."""

    model_config = ConfigDict(extra="forbid")

    def to_config(self) -> PlacementConfig:
        return PlacementConfig(**self.model_dump(by_alias=False))


class PlacementConfigOut(_PlacementConfigFields):
    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_config(cls, config: PlacementConfig) -> "PlacementConfigOut":
        return cls.model_validate(config.to_document())


class PlacementConfigValidationOut(BaseModel):
    valid: bool


class PlacementConfigErrorOut(BaseModel):
    detail: str
    code: int
    collections: List[str] = Field(default_factory=list)
