import pytest

from x402_bch.errors import InvalidRoutePattern
from x402_bch.routes import (
    compile_routes,
    find_matching_route,
    normalize_path,
    normalize_route_config,
    parse_route_pattern,
)


class TestParseRoutePattern:
    def test_verb_and_path(self):
        verb, regex = parse_route_pattern("get /protected")
        assert verb == "GET"
        assert regex.match("/protected")

    def test_path_only_matches_any_verb(self):
        verb, _ = parse_route_pattern("/protected")
        assert verb == "*"

    def test_case_insensitive(self):
        _, regex = parse_route_pattern("/Protected")
        assert regex.match("/PROTECTED")

    def test_whole_string_match(self):
        _, regex = parse_route_pattern("/api")
        assert regex.match("/api")
        assert not regex.match("/api/users")
        assert not regex.match("/v1/api")

    def test_wildcard_crosses_segments(self):
        _, regex = parse_route_pattern("/api/*")
        assert regex.match("/api/users")
        assert regex.match("/api/users/123")
        assert regex.match("/api/")
        assert not regex.match("/other/path")

    def test_param_matches_single_segment(self):
        _, regex = parse_route_pattern("/users/[id]/profile")
        assert regex.match("/users/42/profile")
        assert not regex.match("/users/42/43/profile")
        assert not regex.match("/users//profile")

    def test_metacharacters_are_literal(self):
        _, regex = parse_route_pattern("/files/report.v1+(final)")
        assert regex.match("/files/report.v1+(final)")
        assert not regex.match("/files/reportXv1+(final)")

    def test_pattern_source(self):
        _, regex = parse_route_pattern("GET /a/*")
        assert regex.pattern == r"^\/a\/.*?$"

    @pytest.mark.parametrize("pattern", ["", "   ", "GET ", "GET \t"])
    def test_missing_path_is_rejected(self, pattern):
        with pytest.raises(InvalidRoutePattern):
            parse_route_pattern(pattern)


class TestNormalizeRouteConfig:
    def test_bare_number(self):
        config = normalize_route_config(1500)
        assert config.price == 1500
        assert config.network == "bch"

    def test_bare_string_uses_global_network(self):
        config = normalize_route_config("2000 sats", "bchtest")
        assert config.price == "2000 sats"
        assert config.network == "bchtest"

    def test_route_network_overrides_global(self):
        config = normalize_route_config(
            {"price": 10, "network": "bchreg", "config": {"mimeType": "text/plain"}},
            "bchtest",
        )
        assert config.network == "bchreg"
        assert config.config.mime_type == "text/plain"

    def test_verbose_min_amount(self):
        config = normalize_route_config({"minAmountRequired": "700"})
        assert config.min_amount_required == "700"
        assert config.config.discoverable is True


class TestCompileRoutes:
    def test_one_entry_per_key_in_order(self):
        routes = compile_routes({"network": "bch", "/a": 1, "POST /b": 2, "/c/*": 3})
        assert [r.verb for r in routes] == ["*", "POST", "*"]
        assert [r.config.price for r in routes] == [1, 2, 3]

    def test_network_key_applies_to_all_routes(self):
        routes = compile_routes({"network": "bchtest", "/a": 1, "/b": {"price": 2}})
        assert all(r.config.network == "bchtest" for r in routes)

    def test_invalid_key_aborts(self):
        with pytest.raises(InvalidRoutePattern):
            compile_routes({"/ok": 1, "DELETE ": 2})

    @pytest.mark.parametrize("network", [1, ["bch"], {"name": "bch"}])
    def test_non_string_network_aborts(self, network):
        with pytest.raises(InvalidRoutePattern) as exc_info:
            compile_routes({"network": network, "/a": 1})
        assert exc_info.value.pattern == "network"

    @pytest.mark.parametrize(
        "value",
        [
            {"price": [1]},
            {"price": 10, "network": None},
            {"price": 10, "config": {"maxTimeoutSeconds": "soon"}},
            [1500],
        ],
    )
    def test_ill_typed_route_value_aborts(self, value):
        with pytest.raises(InvalidRoutePattern) as exc_info:
            compile_routes({"GET /a": value})
        assert exc_info.value.pattern == "GET /a"


class TestNormalizePath:
    def test_strips_query_and_fragment(self):
        assert normalize_path("/a/b?x=1#frag") == "/a/b"

    def test_percent_decoding(self):
        assert normalize_path("/caf%C3%A9") == "/café"

    def test_backslashes_and_repeated_slashes(self):
        assert normalize_path("\\a\\\\b//c") == "/a/b/c"

    def test_trailing_slashes(self):
        assert normalize_path("/a/b///") == "/a/b"

    def test_root_is_kept(self):
        assert normalize_path("/") == "/"
        assert normalize_path("///") == "/"

    @pytest.mark.parametrize("path", ["/%E0%A4%A", "/%ZZ", "/bad%"])
    def test_malformed_encoding_raises(self, path):
        with pytest.raises(ValueError):
            normalize_path(path)


class TestFindMatchingRoute:
    def test_bare_price_routes_match_any_method(self):
        routes = compile_routes({"/one": 100, "/two": "200"})
        for method in ["GET", "post", "Delete", "PATCH"]:
            route = find_matching_route(routes, "/two", method)
            assert route is not None
            assert route.verb == "*"
            assert route.config.price == "200"

    def test_method_is_case_insensitive(self):
        routes = compile_routes({"GET /protected": {"price": 1500}})
        assert find_matching_route(routes, "/protected", "get") is not None
        assert find_matching_route(routes, "/protected", "GeT") is not None
        assert find_matching_route(routes, "/protected", "POST") is None

    def test_longer_pattern_wins(self):
        routes = compile_routes({"GET /a/*": 900, "GET /a/reports": 1400})
        route = find_matching_route(routes, "/a/reports", "GET")
        assert route.config.price == 1400

        route = find_matching_route(routes, "/a/other", "GET")
        assert route.config.price == 900

    def test_longer_wildcard_pattern_can_beat_literal(self):
        routes = compile_routes({"/ab": 1, "/*/*/*": 2})
        # "^\/ab$" is shorter than "^\/.*?\/.*?\/.*?$", but only one matches
        assert find_matching_route(routes, "/ab", "GET").config.price == 1

        routes = compile_routes({"/x/y": 1, "/*/*": 2})
        assert find_matching_route(routes, "/x/y", "GET").config.price == 2

    def test_tie_keeps_first_route(self):
        routes = compile_routes({"/a/[id]": 1, "/[x]/b": 2})
        assert find_matching_route(routes, "/a/b", "GET").config.price == 1

    def test_normalization_applies(self):
        routes = compile_routes({"/api/items": 5})
        assert find_matching_route(routes, "//api///items/?page=2", "GET") is not None
        assert find_matching_route(routes, "/api%2Fitems", "GET") is not None

    def test_malformed_encoding_returns_none(self):
        routes = compile_routes({"/*": 5})
        assert find_matching_route(routes, "/%E0%A4%A", "GET") is None

    def test_unconfigured_path(self):
        routes = compile_routes({"/paid": 5})
        assert find_matching_route(routes, "/free", "GET") is None
