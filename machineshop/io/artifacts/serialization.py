"""Trained model serialization utilities.

We persist a dict package via joblib with the structure:

{
  "__machineshop_artifact__": true,
  "schema_version": "1",
  "meta": {"created_at": datetime, "response_kind": str, "label": str, "winners": [...]},
  "model": <trained object: FittedModel / StackedFit / SuperFit>,
  "steps": [TrainStep, ...],
}

Model families are stored by reference to their fit/predict callables, so
families built from module-level functions (all builtins) round-trip while
lambdas or closures do not.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, Optional, Tuple, Union

import joblib

from machineshop.components.specs.nodes import node_label
from machineshop.components.training.meta_trainer import TrainResult

SCHEMA_VERSION = "1"
MAGIC_KEY = "__machineshop_artifact__"


@dataclass
class SaveResult:
    content_bytes: bytes
    size: int
    sha256: str


def _ensure_trained(model: Any) -> None:
    if not callable(getattr(model, "predict", None)):
        raise ValueError("Trained model must expose a predict() method.")
    if getattr(model, "spec", None) is None:
        raise ValueError("Trained model must carry the spec it was trained from.")


def _validate_meta(meta: Dict[str, Any]) -> None:
    required = ["created_at", "response_kind", "label", "winners"]
    missing = [k for k in required if k not in meta]
    if missing:
        raise ValueError(f"Artifact meta missing required keys: {missing}")
    if not isinstance(meta["created_at"], datetime):
        raise ValueError("Artifact meta 'created_at' must be a datetime object")
    if not isinstance(meta["winners"], list):
        raise ValueError("Artifact meta 'winners' must be a list")


def _hash_bytes(b: bytes) -> str:
    return hashlib.sha256(b).hexdigest()


def build_meta(result: TrainResult, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    meta = {
        "created_at": datetime.now(),
        "response_kind": str(getattr(result.model, "response_kind", "")),
        "label": node_label(result.model.spec),
        "winners": [step.winner for step in result.steps],
    }
    meta.update(extra or {})
    return meta


def save_trained(result: TrainResult, meta: Optional[Dict[str, Any]] = None) -> SaveResult:
    """Serialize a training result (model + steps) to joblib bytes."""

    _ensure_trained(result.model)
    meta = build_meta(result, meta)
    _validate_meta(meta)

    package = {
        MAGIC_KEY: True,
        "schema_version": SCHEMA_VERSION,
        "meta": meta,
        "model": result.model,
        "steps": list(result.steps),
    }

    buf = BytesIO()
    joblib.dump(package, buf, compress=3)
    data = buf.getvalue()
    digest = _hash_bytes(data)
    return SaveResult(content_bytes=data, size=len(data), sha256=digest)


def load_trained(payload: Union[bytes, BytesIO]) -> Tuple[TrainResult, Dict[str, Any]]:
    """Deserialize an artifact payload and validate."""

    buf = BytesIO(payload) if isinstance(payload, bytes) else payload
    package = joblib.load(buf)

    if not isinstance(package, dict) or not package.get(MAGIC_KEY):
        raise ValueError("Not a valid machineshop artifact package")

    if str(package.get("schema_version")) != SCHEMA_VERSION:
        raise ValueError(
            f"Incompatible schema_version: {package.get('schema_version')}, expected {SCHEMA_VERSION}"
        )

    meta = package.get("meta")
    model = package.get("model")
    if meta is None or model is None:
        raise ValueError("Corrupt artifact: missing 'meta' or 'model'")

    _validate_meta(meta)
    _ensure_trained(model)

    return TrainResult(model=model, steps=list(package.get("steps") or [])), meta
