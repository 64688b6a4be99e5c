from prebind.compactor import CacheContext


def test_tokens_follow_first_use():
    context = CacheContext()

    assert [context.resolve(k) for k in ("longA", "longB", "longA")] == [
        "0",
        "1",
        "0",
    ]
    assert context.alias_map == {"longA": "0", "longB": "1"}
    assert context.next_index == 2


def test_issued_tokens_resolve_to_themselves():
    context = CacheContext()
    token = context.resolve("_compute(a, b)")

    assert context.resolve(token) == token
    assert context.next_index == 1
    assert len(context) == 1


def test_lookup_does_not_assign():
    context = CacheContext()

    assert context.lookup("missing") is None
    assert context.next_index == 0


def test_contexts_are_independent():
    first, second = CacheContext(), CacheContext()
    first.resolve("a")
    first.resolve("b")

    assert second.resolve("b") == "0"
    assert first.lookup("b") == "1"


def test_reserved_names_are_never_issued():
    context = CacheContext()
    context.reserve(["1", "m(a)"])

    assert context.resolve("1") == "0"
    assert context.resolve("m(a)") == "2"
    assert context.resolve("2") == "2"
    assert context.lookup("1") == "0"


def test_reserving_a_token_keeps_it_a_token():
    context = CacheContext()
    token = context.resolve("a")
    context.reserve([token])

    assert context.resolve(token) == token
    assert context.resolve("b") == "1"
