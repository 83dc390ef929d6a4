from kanalyze.history import add_item, find_item, unique_key


def test_most_recent_first(make_result):
    history = ()
    for i in range(1, 4):
        history = add_item(history, make_result(f"id{i}"), f"data:image/png;base64,{i}", 1000.0 * i)

    assert [item.analysis_id for item in history] == ["id3", "id2", "id1"]
    assert len(history) == 3


def test_add_item_does_not_mutate_previous_history(make_result):
    first = add_item((), make_result("a"), "src-a", 1.0)
    second = add_item(first, make_result("b"), "src-b", 2.0)

    assert len(first) == 1
    assert len(second) == 2
    assert second[1] is first[0]


def test_repeated_analysis_ids_get_unique_keys(make_result):
    history = ()
    for _ in range(3):
        history = add_item(history, make_result("string"), "src", 1.0)

    assert [item.key for item in history] == ["string-3", "string-2", "string"]
    assert all(item.analysis_id == "string" for item in history)


def test_unique_key_skips_taken_suffixes(make_result):
    history = add_item((), make_result("x"), "src", 1.0)
    history = add_item(history, make_result("x-2"), "src", 2.0)

    assert unique_key(history, "x") == "x-3"
    assert unique_key(history, "y") == "y"


def test_find_item(make_result):
    history = add_item((), make_result("a"), "src-a", 1.0)
    history = add_item(history, make_result("b"), "src-b", 2.0)

    assert find_item(history, "a").image_src == "src-a"
    assert find_item(history, "missing") is None
