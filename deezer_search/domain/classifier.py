from __future__ import annotations

import re
from typing import Any, Optional

from .entities import CatalogKind, CatalogReference


CATALOG_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.)?deezer\.com/(?:\w{2}/)?(track|album|playlist)/(\d+)"
)


def classify(text: Any) -> Optional[CatalogReference]:
    """Extract the entity kind and id from a Deezer URL.

    Returns None for anything that is not a catalog URL, which is the normal case
    for plain text searches.
    """
    if not isinstance(text, str):
        return None
    match = CATALOG_URL_PATTERN.match(text)
    if not match:
        return None
    kind, entity_id = match.groups()
    return CatalogReference(kind=CatalogKind(kind), id=entity_id)
