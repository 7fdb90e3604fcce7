from __future__ import annotations

import json
import threading
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml
from pydantic import ValidationError

from affinity_placement.errors import ErrorCode, PlacementConfigLoadError
from affinity_placement.logger import get_logger
from affinity_placement.placement_config import DEFAULT, PlacementConfig
from affinity_placement.schemas.placement_config import PlacementConfigPayload

_logger = get_logger("services.placement_config")
_YAML_SUFFIXES = {".yaml", ".yml"}
_JSON_SUFFIXES = {".json"}

PathLike = Union[str, Path]


def _format_validation_error(exc: ValidationError) -> str:
    issues = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        issues.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "Invalid placement config: " + "; ".join(issues)


def parse_document(data: Any) -> PlacementConfig:
    """Build a config from a decoded document; does not check disjointness."""
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise PlacementConfigLoadError(
            f"Placement config document must be an object, got {type(data).__name__}."
        )
    try:
        payload = PlacementConfigPayload.model_validate(dict(data))
    except ValidationError as exc:
        raise PlacementConfigLoadError(_format_validation_error(exc)) from exc
    return payload.to_config()


def _suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in _YAML_SUFFIXES and suffix not in _JSON_SUFFIXES:
        raise PlacementConfigLoadError(
            f"Unsupported placement config format '{suffix or path.name}'; use .json, .yaml or .yml."
        )
    return suffix


def load_document(path: PathLike) -> Dict[str, Any]:
    file_path = Path(path).expanduser()
    suffix = _suffix(file_path)
    if not file_path.is_file():
        raise PlacementConfigLoadError(
            f"Placement config file not found: {file_path}", ErrorCode.NOT_FOUND
        )

    raw = file_path.read_text(encoding="utf-8")
    try:
        if suffix in _YAML_SUFFIXES:
            parsed = yaml.safe_load(raw)
        else:
            parsed = json.loads(raw) if raw.strip() else None
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise PlacementConfigLoadError(f"Could not parse {file_path}: {exc}") from exc

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise PlacementConfigLoadError(
            f"Placement config document must be an object, got {type(parsed).__name__}."
        )
    return parsed


def load_config(path: PathLike, *, validate: bool = True) -> PlacementConfig:
    with _logger.operation(
        "placement_config.load",
        "Loading placement config",
        path=str(path),
    ) as op:
        document = load_document(path)
        op.step_debug("file.read", "Read placement config document", keys=len(document))
        config = parse_document(document)
        if validate:
            config.validate()
            op.step("config.validate", "Validated placement config")
    return config


def dump_document(config: PlacementConfig, path: PathLike) -> Path:
    file_path = Path(path).expanduser()
    suffix = _suffix(file_path)
    document = config.to_document()
    if suffix in _YAML_SUFFIXES:
        rendered = yaml.safe_dump(document, sort_keys=False)
    else:
        rendered = json.dumps(document, indent=2) + "\n"
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(rendered, encoding="utf-8")
    _logger.info("placement_config.dump", "Wrote placement config", path=str(file_path))
    return file_path


class PlacementConfigStore:
    """Holds the active placement config shared with the placement engine.

    Only validated configs are installed; readers get the frozen instance.
    """

    def __init__(self, initial: PlacementConfig = DEFAULT) -> None:
        self._lock = threading.Lock()
        self._config = initial

    def get(self) -> PlacementConfig:
        return self._config

    def set(self, config: PlacementConfig) -> PlacementConfig:
        config.validate()
        with self._lock:
            self._config = config
        _logger.info(
            "placement_config.set",
            "Installed placement config",
            minimal_free_disk_gb=config.minimal_free_disk_gb,
            prioritized_free_disk_gb=config.prioritized_free_disk_gb,
            with_collection=len(config.with_collection),
            with_collection_shards=len(config.with_collection_shards),
            collection_node_type=len(config.collection_node_type),
            spread_across_domains=config.spread_across_domains,
        )
        return config

    def reset(self) -> PlacementConfig:
        with self._lock:
            self._config = DEFAULT
        _logger.info("placement_config.reset", "Reset placement config to defaults")
        return DEFAULT


@lru_cache
def get_store() -> PlacementConfigStore:
    return PlacementConfigStore()
