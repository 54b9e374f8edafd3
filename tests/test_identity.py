from lfp.identity import make_record_id


def test_record_id_joins_zone_and_name():
    record = {"PLZ": "70000", "Einrichtung": "Zoo", "Eintritt": "K"}
    assert make_record_id(record) == "70000::Zoo"


def test_record_id_ignores_other_attributes():
    base = {"PLZ": "70000", "Einrichtung": "Zoo", "Eintritt": "K", "Latitude": 48.7}
    changed = dict(base, Eintritt="E", Latitude=49.1, Hinweis="new note")
    assert make_record_id(base) == make_record_id(changed)


def test_record_id_missing_fields_are_total():
    assert make_record_id({}) == "undefined::undefined"
    assert make_record_id({"Einrichtung": "Zoo"}) == "undefined::Zoo"
    assert make_record_id({"PLZ": None, "Einrichtung": "Zoo"}) == "undefined::Zoo"


def test_record_id_numeric_zone_matches_text_zone():
    assert make_record_id({"PLZ": 70000, "Einrichtung": "Zoo"}) == "70000::Zoo"
    assert make_record_id({"PLZ": 70000.0, "Einrichtung": "Zoo"}) == "70000::Zoo"


def test_records_sharing_zone_and_name_collide():
    a = {"PLZ": "70000", "Einrichtung": "Zoo", "Strasse": "Main 1"}
    b = {"PLZ": "70000", "Einrichtung": "Zoo", "Strasse": "Side 2"}
    assert make_record_id(a) == make_record_id(b)


def test_record_id_is_deterministic():
    record = {"PLZ": "79098", "Einrichtung": "Augustinermuseum"}
    assert make_record_id(record) == make_record_id(dict(record)) == "79098::Augustinermuseum"
