"""Placeholder resolution for declared url templates.

Two grammars are supported: ``${key}`` config placeholders, resolved against a
PropertyResolver, and ``{key}`` path placeholders, resolved against the
request's parameter map. Neither may contain ``/`` between the braces.
"""

import re
from collections import Counter
from logging import getLogger
from typing import Any, MutableMapping, Optional

from ..models.errors import ConfigVariableMissingError, PathVariableMissingError
from ..property_resolver import PropertyResolver
from ._codec import JsonCodec

logger = getLogger(__name__)

PATH_VARIABLE_PATTERN = re.compile(r"\{([^/]+?)}")
CONFIG_VARIABLE_PATTERN = re.compile(r"\$\{([^/]+?)}")
PROTOCOL_PATTERN = re.compile(r"^[a-zA-Z].+://")
MAX_CONFIG_SUBSTITUTIONS = 100


def has_protocol(url: str) -> bool:
    return PROTOCOL_PATTERN.search(url) is not None


def fill_config_variables(url: str, resolver: Optional[PropertyResolver]) -> str:
    """Replace every ``${key}`` in the url with the resolver's value.

    The url is scanned again after each substitution until no config
    placeholder is left, so a value may itself carry placeholders.

    Raises:
        ConfigVariableMissingError: If a key cannot be resolved, or if one key
            is expanded more than ``MAX_CONFIG_SUBSTITUTIONS`` times (a
            circular definition).
    """
    expansions: Counter[str] = Counter()
    match = CONFIG_VARIABLE_PATTERN.search(url)
    while match is not None:
        key = match.group(1)
        value = None
        if resolver is not None and resolver.contains_property(key):
            value = resolver.get_property(key)
        if value is None:
            error = ConfigVariableMissingError(url, key)
            logger.warning(error.message)
            raise error
        expansions[key] += 1
        if expansions[key] > MAX_CONFIG_SUBSTITUTIONS:
            raise ConfigVariableMissingError(
                url, key, f"the url [{url}] has a circular config variable: [{key}]"
            )
        url = url.replace("${" + key + "}", value)
        match = CONFIG_VARIABLE_PATTERN.search(url)
    return url


def fill_path_variables(
    url: str,
    params: Optional[MutableMapping[str, Any]],
    strict: bool,
    codec: Optional[JsonCodec] = None,
) -> str:
    """Replace ``{key}`` placeholders with values popped from ``params``.

    A value used in the url is removed from ``params`` so it is not sent again
    as a query or form field. When ``strict`` is false a missing value is
    logged and the placeholder is kept for a later pass. Values are rendered
    with ``codec.to_text``, the same way query and form fields are sent.

    Raises:
        PathVariableMissingError: If ``strict`` and a value is missing.
    """
    codec = codec or JsonCodec()
    for match in PATH_VARIABLE_PATTERN.finditer(url):
        key = match.group(1)
        token = "{" + key + "}"
        if token not in url:
            # already substituted by an earlier occurrence of the same key
            continue
        if params is None or params.get(key) is None:
            error = PathVariableMissingError(url, key)
            logger.warning(error.message)
            if strict:
                raise error
            continue
        url = url.replace(token, codec.to_text(params.pop(key)))
    return url
