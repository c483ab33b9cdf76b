import pytest

from rings.model.jsons import RDBMS


def test_postgres_json_operations():
    db = RDBMS.POSTGRES
    assert db.extract("name") == "->> 'name'"
    assert db.extract_path("info,address") == "#>'info,address'"
    pairs = [("name", "value"), ("age", "25")]
    assert db.build_object(pairs) == "json_build_object('name', value, 'age', 25)"
    assert db.build_array(["1", "2", "3"]) == "json_build_array(1, 2, 3)"


def test_mysql_json_operations():
    db = RDBMS.MYSQL
    assert db.extract("name") == "->>'$.name'"
    assert db.exists("age") == "JSON_CONTAINS_PATH(data, 'one', '$.age')"
    assert db.set("name", "John") == "JSON_SET(data, '$.name', 'John')"
    assert db.append("value") == "JSON_ARRAY_APPEND(data, '$', 'value')"


def test_postgres_braces_are_literal():
    db = RDBMS.POSTGRES
    assert db.set("name", "John") == "jsonb_set(data, '{name}', 'John')"
    assert db.delete_path("a,b") == "data #- '{a,b}'"
    assert db.append("x") == "jsonb_insert(data, '{-1}', 'x')"
    assert db.update(2, "v") == "jsonb_set(data, '{2}'::text[], 'v')"


def test_sqlite_operations():
    db = RDBMS.SQLITE
    assert db.extract("name") == "json_extract(data, '$.name')"
    assert db.extract_int("age") == "CAST(json_extract(data, '$.age') AS INTEGER)"
    assert db.exists("age") == "json_type(data, '$.age') IS NOT NULL"
    assert db.append("x") == "json_insert(data, '$[#]', 'x')"
    assert db.remove(3) == "json_remove(data, '$[3]')"


@pytest.mark.parametrize(
    "db, expected",
    [
        (RDBMS.POSTGRES, "json_object_keys"),
        (RDBMS.MYSQL, "JSON_KEYS"),
        (RDBMS.SQLITE, "json_group_array(json_each.key)"),
    ],
)
def test_keys(db, expected):
    assert db.keys() == expected


@pytest.mark.parametrize(
    "db, expected",
    [
        (RDBMS.POSTGRES, "json_array_length"),
        (RDBMS.MYSQL, "JSON_LENGTH"),
        (RDBMS.SQLITE, "json_array_length(data)"),
    ],
)
def test_array_length(db, expected):
    assert db.array_length() == expected


def test_build_empty_collections():
    assert RDBMS.MYSQL.build_object([]) == "JSON_OBJECT()"
    assert RDBMS.SQLITE.build_array([]) == "json_array()"


@pytest.mark.parametrize(
    "db, expected",
    [
        (RDBMS.POSTGRES, "jsonb_set(data, '{k}', 'v')"),
        (RDBMS.MYSQL, "JSON_SET(data, '$.k', 'v')"),
        (RDBMS.SQLITE, "json_set(data, '$.k', 'v')"),
    ],
)
def test_set_and_set_path_for_single_field(db, expected):
    assert db.set("k", "v") == expected
    assert db.set_path("k", "v") == expected


def test_merge_and_delete():
    assert RDBMS.POSTGRES.merge("{}") == "data || '{}'"
    assert RDBMS.MYSQL.merge("{}") == "JSON_MERGE_PATCH(data, '{}')"
    assert RDBMS.POSTGRES.delete("k") == "data - 'k'"
    assert RDBMS.MYSQL.remove(0) == "JSON_REMOVE(data, '$[0]')"