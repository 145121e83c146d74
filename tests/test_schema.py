from volcheck.io.schema import validate_document


def _doc(**overrides):
    doc = {
        "lunit": "mm",
        "solids": {
            "W": {"type": "box", "x": 10, "y": 10, "z": 10},
            "B": {"type": "orb", "r": 1},
        },
        "volumes": {
            "World": {"solid": "W", "children": [
                {"name": "b1", "volume": "BV", "position": [1, 0, 0]},
                {"name": "b2", "volume": "BV", "position": [-1, 0, 0]},
            ]},
            "BV": {"solid": "B"},
        },
        "world": "World",
    }
    doc.update(overrides)
    return doc


def test_valid():
    ok, messages = validate_document(_doc())
    assert ok
    assert messages == []


def test_not_a_mapping():
    ok, messages = validate_document(["solids"])
    assert not ok
    assert messages[0].startswith("ERROR:")


def test_units():
    ok, messages = validate_document(_doc(lunit="furlong", aunit="grad"))
    assert not ok
    assert any("length unit" in m for m in messages)
    assert any("angle unit" in m for m in messages)


def test_missing_sections():
    ok, messages = validate_document(_doc(solids={}))
    assert not ok
    assert "solids" in messages[-1]


def test_bad_vector():
    doc = _doc()
    doc["volumes"]["World"]["children"][0]["position"] = [1, 2]
    ok, messages = validate_document(doc)
    assert not ok
    assert any("position must be a list of three numbers" in m for m in messages)


def test_bad_field_value():
    doc = _doc()
    doc["solids"]["B"]["r"] = "big"
    ok, messages = validate_document(doc)
    assert not ok
    assert any("field 'r' must be a number" in m for m in messages)


def test_unknown_references():
    doc = _doc(world="Nowhere")
    doc["solids"]["S"] = {"type": "subtraction", "first": "W", "second": "Q"}
    doc["volumes"]["BV"]["solid"] = "Missing"
    ok, messages = validate_document(doc)
    assert not ok
    assert any("unknown solid 'Q'" in m for m in messages)
    assert any("unknown solid 'Missing'" in m for m in messages)
    assert any("world refers to unknown volume 'Nowhere'" in m for m in messages)


def test_duplicate_name_is_warning():
    doc = _doc()
    doc["volumes"]["World"]["children"][1]["name"] = "b1"
    ok, messages = validate_document(doc)
    assert ok
    assert len(messages) == 1
    assert messages[0].startswith("WARNING:")


def test_unhashable_units():
    ok, messages = validate_document(_doc(lunit=["mm"], aunit={"deg": 1}))
    assert not ok
    assert any("length unit ['mm']" in m for m in messages)
    assert any("angle unit {'deg': 1}" in m for m in messages)


def test_copy_number():
    doc = _doc()
    doc["volumes"]["World"]["children"][0]["copy"] = "abc"
    doc["volumes"]["World"]["children"][1]["copy"] = 3
    ok, messages = validate_document(doc)
    assert not ok
    assert messages == ["ERROR: volume 'World' child 0 copy must be an integer, got 'abc'"]
