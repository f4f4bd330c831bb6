"""Route pricing configuration compiled into path matchers.

A route map looks like::

    {
        "network": "bch",
        "GET /weather": 1500,
        "/reports/*": {"price": "2000 sats", "config": {"description": "Reports"}},
        "POST /jobs/[id]": {"minAmountRequired": 5000},
    }

Keys are ``"VERB /path"`` or ``"/path"`` (any verb). ``*`` matches any run of
characters, across segments. ``[name]`` matches exactly one path segment.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, Sequence
from urllib.parse import unquote

from pydantic import ValidationError

from x402_bch.constants import DEFAULT_NETWORK, NETWORK_KEY
from x402_bch.errors import InvalidRoutePattern
from x402_bch.types import CompiledRoute, RouteConfig

logger = logging.getLogger(__name__)

_REGEX_METACHARACTERS = re.compile(r"([$()+.?^{|}])")
_PARAM_SEGMENT = re.compile(r"\[([^\]]+)\]")
_BAD_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def normalize_route_config(value: Any, network: Optional[str] = None) -> RouteConfig:
    """Expand a route map value into a RouteConfig.

    A bare price becomes ``{price, network}``. A mapping keeps its own
    ``network`` if it sets one, otherwise inherits the map-wide network.
    """
    network = network or DEFAULT_NETWORK

    if isinstance(value, RouteConfig):
        return value
    if isinstance(value, Mapping):
        return RouteConfig.model_validate({"network": network, **value})
    return RouteConfig(price=value, network=network)


def parse_route_pattern(pattern: str) -> tuple[str, re.Pattern[str]]:
    """Parse a route key into its verb and compiled path regex."""
    if re.search(r"\s", pattern):
        parts = pattern.split(None, 1)
        verb = parts[0].upper() if parts else "*"
        path = parts[1].strip() if len(parts) == 2 else ""
    else:
        verb, path = "*", pattern

    if not path:
        raise InvalidRoutePattern(pattern)

    regex_pattern = _REGEX_METACHARACTERS.sub(r"\\\1", path)
    regex_pattern = regex_pattern.replace("*", ".*?")
    regex_pattern = _PARAM_SEGMENT.sub("[^/]+", regex_pattern)
    regex_pattern = regex_pattern.replace("/", r"\/")

    try:
        return verb, re.compile(f"^{regex_pattern}$", re.IGNORECASE)
    except re.error as e:
        raise InvalidRoutePattern(pattern, str(e)) from e


def compile_routes(routes: Mapping[str, Any]) -> tuple[CompiledRoute, ...]:
    """Compile a route map into matchers, one per key, in map order."""
    network = routes.get(NETWORK_KEY)
    if network is not None and not isinstance(network, str):
        raise InvalidRoutePattern(NETWORK_KEY, "network must be a string")

    compiled = []
    for pattern, value in routes.items():
        if pattern == NETWORK_KEY:
            continue

        verb, regex = parse_route_pattern(pattern)
        try:
            config = normalize_route_config(value, network)
        except ValidationError as e:
            error = e.errors()[0]
            location = ".".join(str(part) for part in error["loc"]) or "value"
            raise InvalidRoutePattern(pattern, f"{location}: {error['msg']}") from e

        compiled.append(CompiledRoute(verb=verb, regex=regex, config=config))

    return tuple(compiled)


def normalize_path(path: str) -> str:
    """Normalize a request path for matching.

    Raises:
        ValueError: If the path has malformed percent-encoding.
    """
    path = re.split(r"[?#]", path, maxsplit=1)[0]

    if _BAD_PERCENT_ESCAPE.search(path):
        raise ValueError(f"Malformed percent-encoding in path: {path!r}")
    path = unquote(path, errors="strict")

    path = path.replace("\\", "/")
    path = re.sub(r"/+", "/", path)
    path = re.sub(r"(.+?)/+$", r"\1", path)

    return path


def find_matching_route(
    routes: Sequence[CompiledRoute], path: str, method: str
) -> Optional[CompiledRoute]:
    """Find the most specific compiled route for a request.

    When several routes match, the one whose regex source is longest wins;
    ties keep the earlier route.
    """
    try:
        normalized_path = normalize_path(path)
    except (ValueError, UnicodeDecodeError):
        logger.debug("Unable to decode request path %r, treating as unmatched", path)
        return None

    upper_method = method.upper()
    best: Optional[CompiledRoute] = None

    for route in routes:
        if route.verb != "*" and route.verb != upper_method:
            continue
        if not route.regex.match(normalized_path):
            continue
        if best is None or len(route.regex.pattern) > len(best.regex.pattern):
            best = route

    return best
