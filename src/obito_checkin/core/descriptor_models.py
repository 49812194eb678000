#!/usr/bin/env python3
"""
Descriptor models for the check-in API.

These dataclasses describe where the remote service lives, which endpoints
serve the profile and check-in actions, and which response fields carry the
account identity. The built-in descriptor targets Hi-Pin; a JSON or YAML file
with the same shape can point the bot at a compatible deployment.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from obito_checkin.config import ConfigError, ERROR_MESSAGES

logger = logging.getLogger(__name__)

DESCRIPTOR_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'descriptors')
DEFAULT_DESCRIPTOR = os.path.join(DESCRIPTOR_DIR, 'hipin.json')

PROFILE_ENDPOINT = "profile"
CHECK_IN_ENDPOINT = "check_in"


class DescriptorError(ConfigError):
    """Raised when a descriptor file is malformed."""


@dataclass
class Endpoint:
    name: str
    method: str
    path: str
    body: Optional[Dict[str, Any]] = None


@dataclass
class ResponseFields:
    data_key: Optional[str] = "data"  # envelope key holding the account; None = top level
    id: str = "id"
    name: str = "name"
    checked_in: str = "isCheckIn"


@dataclass
class ApiDescriptor:
    schema_version: int
    service_key: str
    display_name: str
    base_url: str
    headers: Dict[str, str] = field(default_factory=dict)
    timeouts: Dict[str, int] = field(default_factory=dict)  # milliseconds, e.g. {"request": 10000}
    endpoints: List[Endpoint] = field(default_factory=list)
    response: ResponseFields = field(default_factory=ResponseFields)

    def endpoint(self, name: str) -> Endpoint:
        for ep in self.endpoints:
            if ep.name == name:
                return ep
        raise DescriptorError(f"Descriptor '{self.service_key}' has no '{name}' endpoint")

    def url_for(self, name: str) -> str:
        return self.base_url.rstrip('/') + '/' + self.endpoint(name).path.lstrip('/')


def _coerce_endpoint(obj: dict) -> Endpoint:
    body = obj.get("body")
    return Endpoint(
        name=str(obj.get("name", "step")),
        method=str(obj.get("method", "GET")).upper(),
        path=str(obj["path"]),
        body=dict(body) if isinstance(body, dict) else None,
    )


def _coerce_response(obj: Optional[dict]) -> ResponseFields:
    if not obj:
        return ResponseFields()
    data_key = obj.get("data_key", "data")
    return ResponseFields(
        data_key=str(data_key) if data_key else None,
        id=str(obj.get("id", "id")),
        name=str(obj.get("name", "name")),
        checked_in=str(obj.get("checked_in", "isCheckIn")),
    )


def from_dict(data: dict) -> ApiDescriptor:
    """Create an ApiDescriptor from a dict with minimal validation."""
    try:
        service_key = str(data["service_key"]).strip()
        base_url = str(data["base_url"]).strip()
        eps = [_coerce_endpoint(e) for e in data.get("endpoints", []) if isinstance(e, dict)]
    except KeyError as exc:
        raise DescriptorError(f"Descriptor is missing required key: {exc}") from exc

    try:
        descriptor = ApiDescriptor(
            schema_version=int(data.get("schema_version", 1)),
            service_key=service_key,
            display_name=str(data.get("display_name", service_key)).strip(),
            base_url=base_url,
            headers={str(k): str(v) for k, v in dict(data.get("headers") or {}).items()},
            timeouts={str(k): int(v) for k, v in dict(data.get("timeouts") or {}).items()},
            endpoints=eps,
            response=_coerce_response(data.get("response")),
        )
    except (ValueError, TypeError, AttributeError) as exc:
        raise DescriptorError(f"Descriptor '{service_key}' has an invalid value: {exc}") from exc
    # Both actions are required up front.
    descriptor.endpoint(PROFILE_ENDPOINT)
    descriptor.endpoint(CHECK_IN_ENDPOINT)
    return descriptor


def load_descriptor(path: Optional[str] = None) -> ApiDescriptor:
    """Load a descriptor from JSON or YAML; the built-in Hi-Pin one by default."""
    path = path or DEFAULT_DESCRIPTOR
    if not os.path.isfile(path):
        raise ConfigError(ERROR_MESSAGES['descriptor_not_found'].format(file=path))

    try:
        with open(path, 'r', encoding='utf-8') as fh:
            if path.lower().endswith(('.yaml', '.yml')):
                data = yaml.safe_load(fh)
            else:
                data = json.load(fh)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise DescriptorError(f"Failed to parse descriptor '{os.path.basename(path)}': {exc}") from exc

    if not isinstance(data, dict):
        raise DescriptorError(f"Descriptor file is not a mapping: {os.path.basename(path)}")

    descriptor = from_dict(data)
    logger.debug(f"Loaded descriptor {descriptor.service_key} from {path}")
    return descriptor
