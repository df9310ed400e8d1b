"""
Unit tests for field path handling.

Tests cover:
- Parsing and formatting dotted/indexed names
- Building nested payloads from flat form data
- Treating blank entries as missing
"""

from app.formstate.paths import APPEND, build_payload, compact, format_path, get_value, parse_path, set_value


class TestParsePath:
    """Tests for parse_path() / format_path()"""

    def test_plain_name(self):
        assert parse_path("email") == ["email"]

    def test_dotted_name(self):
        assert parse_path("thing.name") == ["thing", "name"]

    def test_indexed_name(self):
        assert parse_path("tasks[1]") == ["tasks", 1]
        assert parse_path("a.b[0].c") == ["a", "b", 0, "c"]

    def test_append_marker(self):
        assert parse_path("tasks[]") == ["tasks", APPEND]

    def test_malformed_name_kept_whole(self):
        assert parse_path("tasks[x]") == ["tasks[x]"]
        assert parse_path("a..b") == ["a..b"]

    def test_format_is_inverse(self):
        for name in ("email", "thing.name", "tasks[3]", "a.b[0].c", "tasks[]"):
            assert format_path(parse_path(name)) == name

    def test_format_pydantic_loc(self):
        """Error locations from pydantic are tuples of str/int"""
        assert format_path(("tasks", 0)) == "tasks[0]"
        assert format_path(()) == ""


class TestSetAndGet:
    def test_creates_nested_containers(self):
        target = {}
        set_value(target, ["a", "b", 1, "c"], "x")
        assert target == {"a": {"b": [None, {"c": "x"}]}}

    def test_get_missing_returns_default(self):
        source = {"tasks": ["1"]}
        assert get_value(source, ["tasks", 0]) == "1"
        assert get_value(source, ["tasks", 5]) is None
        assert get_value(source, ["thing", "name"], "n/a") == "n/a"


class TestBuildPayload:
    def test_nested_and_indexed(self):
        payload, rejected = build_payload(
            [
                ("email", ["dusty+one@postal.io"]),
                ("thing.name", ["one"]),
                ("tasks[1]", ["2"]),
                ("tasks[0]", ["1"]),
            ]
        )
        assert payload == {
            "email": "dusty+one@postal.io",
            "thing": {"name": "one"},
            "tasks": ["1", "2"],
        }
        assert rejected == []

    def test_repeated_name_becomes_list(self):
        assert build_payload([("tasks", ["a", "b"])]) == ({"tasks": ["a", "b"]}, [])

    def test_bracket_suffix_appends(self):
        assert build_payload([("tasks[]", ["a"])]) == ({"tasks": ["a"]}, [])
        assert build_payload([("tasks[]", ["a", "b"])]) == ({"tasks": ["a", "b"]}, [])


class TestHostileNames:
    """Names a browser wouldn't send but a client can"""

    def test_index_past_submitted_values_rejected(self):
        payload, rejected = build_payload([("email", ["e"]), ("tasks[3000000]", ["x"])])
        assert payload == {"email": "e"}
        assert rejected == ["tasks[3000000]"]

    def test_index_bound_is_number_of_values(self):
        payload, rejected = build_payload([("tasks[0]", ["a"]), ("tasks[1]", ["b"]), ("tasks[2]", ["c"])])
        assert payload == {"tasks": ["a", "b", "c"]}
        assert rejected == []
        _, rejected = build_payload([("tasks[0]", ["a"]), ("tasks[2]", ["c"])])
        assert rejected == ["tasks[2]"]

    def test_nested_index_bounded_too(self):
        _, rejected = build_payload([("a[0].b[999]", ["x"])])
        assert rejected == ["a[0].b[999]"]

    def test_empty_name_is_a_plain_key(self):
        assert parse_path("") == [""]
        assert build_payload([("", ["x"])]) == ({"": "x"}, [])

    def test_append_marker_is_not_a_string(self):
        assert APPEND != ""
        assert parse_path("tasks[]")[-1] is APPEND

    def test_conflicting_scalar_and_object(self):
        payload, _ = build_payload([("email", ["e"]), ("email.x", ["y"])])
        assert payload == {"email": {"x": "y"}}
        payload, _ = build_payload([("email.x", ["y"]), ("email", ["e"])])
        assert payload == {"email": "e"}

    def test_conflicting_list_and_object(self):
        payload, _ = build_payload([("tasks[0]", ["a"]), ("tasks.x", ["b"])])
        assert payload == {"tasks": {"x": "b"}}


class TestCompact:
    def test_blank_string_is_missing(self):
        assert compact({"email": "", "password": "x"}) == {"password": "x"}

    def test_empty_object_collapses(self):
        assert compact({"thing": {"name": ""}, "email": "e"}) == {"email": "e"}

    def test_list_positions_kept(self):
        assert compact({"tasks": ["", "b"]}) == {"tasks": [None, "b"]}

    def test_everything_blank(self):
        assert compact({"email": ""}) is None
