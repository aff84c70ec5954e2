"""Catalogue discovery: query identifiers, resolve their names, fold."""

import logging
from typing import Any

from .client import FetchError, XPipeClient
from .models import Catalogue, CatalogueFilters

logger = logging.getLogger(__name__)


def display_name(identifier: str, info: dict[str, Any]) -> str:
    """First entry of the info's name list, or the identifier itself."""
    names = info.get("name")
    if names is None:
        return identifier
    if not isinstance(names, list):
        raise FetchError(f"Info for {identifier} has a malformed name")
    if names and isinstance(names[0], str) and names[0]:
        return names[0]
    return identifier


def container_name(info: dict[str, Any]) -> str | None:
    """Nested resource name from the info's raw data, if any."""
    raw = info.get("rawData")
    if not isinstance(raw, dict):
        return None
    name = raw.get("containerName")
    if isinstance(name, str) and name:
        return name
    return None


def fold_infos(identifiers: list[str], infos: list[dict[str, Any]]) -> Catalogue:
    """Fold query identifiers and their infos into a Catalogue.

    A server's entry collects, in discovery order, the query identifier of
    every info carrying its name plus any nested container name found in that
    info's raw data.
    """
    if len(identifiers) != len(infos):
        raise FetchError(f"Got {len(infos)} infos for {len(identifiers)} connections")

    catalogue = Catalogue()
    for identifier, info in zip(identifiers, infos):
        if not isinstance(info, dict):
            raise FetchError(f"Info for {identifier} is not an object")
        name = display_name(identifier, info)
        catalogue.add(name, identifier)

        nested = container_name(info)
        if nested:
            catalogue.add(name, nested)

    return catalogue.finalize()


def fetch_catalogue(client: XPipeClient, filters: CatalogueFilters | None = None) -> Catalogue:
    """Query XPipe and return a fresh Catalogue.

    Raises:
        FetchError: either request failed or returned a malformed payload.
    """
    filters = filters or CatalogueFilters()
    identifiers = client.query_connections(filters)
    if not identifiers:
        logger.info(f"No connections match type filter {filters.type!r}")
        return Catalogue()

    infos = client.connection_info(identifiers)
    catalogue = fold_infos(identifiers, infos)
    logger.info(f"Fetched {len(identifiers)} connections, {len(catalogue)} unique targets")
    return catalogue
