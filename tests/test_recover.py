import io
import json
import sys
from fractions import Fraction

import cbor2
import pytest

import errors
import recover
import shareset
from conftest import data_path


def lagrange_at_zero(points):
    total = Fraction(0)
    for i, (xi, yi) in enumerate(points):
        term = Fraction(yi)
        for j, (xj, _) in enumerate(points):
            if i != j:
                term *= Fraction(-xj, xi - xj)
        total += term
    return total


def test_scenario_a(sample1):
    ss = shareset.parse(sample1)
    assert recover.select(ss) == [1, 2, 3]
    assert recover.points(ss) == [(1, 4), (2, 7), (3, 12)]
    assert recover.reconstruct(ss) == "3"
    assert recover.solve(sample1) == {"secret": "3"}


def test_scenario_b_insufficient_shares(sample1):
    sample1["keys"]["k"] = 5
    with pytest.raises(errors.InsufficientShares) as e:
        recover.reconstruct(shareset.parse(sample1))
    assert e.value.needed == 5
    assert e.value.available == 4
    rsp = recover.solve(sample1)
    assert rsp["error"]["kind"] == "InsufficientShares"
    assert rsp["error"]["message"] == "not enough shares - need 5, got 4"


def test_scenario_c_invalid_digit():
    doc = {"keys": {"n": 1, "k": 1}, "1": {"base": "16", "value": "g"}}
    with pytest.raises(errors.InvalidDigit) as e:
        recover.reconstruct(shareset.parse(doc))
    assert e.value.char == "g"
    assert e.value.base == 16
    assert e.value.key == 1
    assert recover.solve(doc) == {
        "error": {
            "kind": "InvalidDigit",
            "message": "share 1: invalid digit 'g' for base 16",
            "key": 1,
            "char": "g",
            "base": 16,
        }
    }


def test_sample2(sample2):
    keys = sorted(int(k) for k in sample2 if k != "keys")[:7]
    points = [
        (k, int(sample2[str(k)]["value"], int(sample2[str(k)]["base"]))) for k in keys
    ]
    assert recover.points(shareset.parse(sample2)) == points

    f0 = lagrange_at_zero(points)
    if f0.denominator == 1:
        expected = {"secret": str(f0.numerator)}
    else:
        expected = {
            "error": {
                "kind": "NonIntegerResult",
                "message": f"shares do not interpolate to an integer "
                f"({f0.numerator}/{f0.denominator})",
            }
        }
    assert recover.solve(sample2) == expected


def test_selection_is_numeric_not_lexical():
    # f(x) = 5 + 2x; share 10 does not lie on it and must not be used
    doc = {
        "keys": {"n": 3, "k": 2},
        "10": {"base": "10", "value": "1000"},
        "2": {"base": "10", "value": "9"},
        "1": {"base": "10", "value": "7"},
    }
    assert recover.select(shareset.parse(doc)) == [1, 2]
    assert recover.solve(doc) == {"secret": "5"}


def test_bad_share_after_k_is_ignored():
    doc = {
        "keys": {"n": 3, "k": 2},
        "1": {"base": "10", "value": "7"},
        "2": {"base": "10", "value": "9"},
        "3": {"base": "2", "value": "not binary"},
    }
    assert recover.solve(doc) == {"secret": "5"}


def test_conversion_errors_are_tagged_with_key():
    doc = {
        "keys": {"k": 3},
        "1": {"base": "10", "value": "7"},
        "4": {"base": "10", "value": ""},
        "2": {"base": "10", "value": "9"},
    }
    with pytest.raises(errors.EmptyValue) as e:
        recover.reconstruct(shareset.parse(doc))
    assert e.value.key == 4

    doc["4"] = {"base": "40", "value": "1"}
    rsp = recover.solve(doc)
    assert rsp["error"]["kind"] == "InvalidBase"
    assert rsp["error"]["key"] == 4


def test_missing_threshold():
    assert recover.solve({"keys": {"n": 1}})["error"]["kind"] == "MissingThreshold"
    ss = shareset.ShareSet(1, 0, {})
    with pytest.raises(errors.MissingThreshold):
        recover.reconstruct(ss)


def test_malformed():
    assert recover.solve({})["error"]["kind"] == "MalformedRecord"
    assert recover.solve([1, 2])["error"]["kind"] == "MalformedRecord"


def test_non_integer_result():
    doc = {
        "keys": {"k": 2},
        "1": {"base": "10", "value": "0"},
        "3": {"base": "10", "value": "1"},
    }
    rsp = recover.solve(doc)
    assert rsp["error"]["kind"] == "NonIntegerResult"


def test_render():
    assert recover.render(0) == "0"
    assert recover.render(42) == "42"
    assert recover.render(-42) == "-42"
    assert recover.render(10**5000) == "1" + "0" * 5000


def test_negative_secret():
    doc = {
        "keys": {"k": 2},
        "1": {"base": "10", "value": "1"},
        "2": {"base": "10", "value": "3"},
    }
    assert recover.solve(doc) == {"secret": "-1"}


def test_deal():
    ss = recover.deal(987654321, 4, 7, [2, 16, 36], bits=80)
    assert ss.n == 7
    assert ss.k == 4
    assert [ss.shares[x].base for x in sorted(ss.shares)] == [2, 16, 36, 2, 16, 36, 2]
    assert recover.reconstruct(ss) == "987654321"

    # any k shares work, not only the first k
    doc = shareset.to_doc(ss)
    for drop in ["1", "2", "3"]:
        del doc[drop]
    assert recover.solve(doc) == {"secret": "987654321"}


def test_deal_threshold_one():
    ss = recover.deal(0, 1, 3, [10])
    assert {s.digits for s in ss.shares.values()} == {"0"}
    assert recover.reconstruct(ss) == "0"


def test_main_join(capsys):
    recover.main(["join", data_path("sample1.json")])
    assert capsys.readouterr().out == "3\n"


def test_main_join_json(capsys):
    recover.main(["join", "--json", data_path("sample1.json")])
    assert json.loads(capsys.readouterr().out) == {"secret": "3"}


def test_main_join_stdin(capsys, monkeypatch, sample1):
    data = json.dumps(sample1).encode("utf8")
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))
    recover.main(["join"])
    assert capsys.readouterr().out == "3\n"


def test_main_join_error(capsys, tmp_path):
    p = tmp_path / "bad.json"
    p.write_text('{"keys": {"n": 1, "k": 1}, "1": {"base": "16", "value": "g"}}')
    with pytest.raises(SystemExit) as e:
        recover.main(["join", str(p)])
    assert e.value.code == 1
    out = capsys.readouterr().out
    assert out == "error: InvalidDigit: share 1: invalid digit 'g' for base 16\n"


def test_main_join_error_json(capsys, tmp_path):
    p = tmp_path / "bad.json"
    p.write_text("{not json")
    with pytest.raises(SystemExit) as e:
        recover.main(["join", "-j", str(p)])
    assert e.value.code == 1
    rsp = json.loads(capsys.readouterr().out)
    assert rsp["error"]["kind"] == "MalformedRecord"


def test_main_join_missing_file(capsys, tmp_path):
    with pytest.raises(SystemExit) as e:
        recover.main(["join", str(tmp_path / "missing.json")])
    assert e.value.code == 1
    assert capsys.readouterr().out.startswith("error: unable to read")


def test_main_split_join(capsys, tmp_path):
    for name in ["shares.json", "shares.cbor"]:
        p = str(tmp_path / name)
        recover.main(
            ["split", "-s", "3,5", "--secret", "31337", "-b", "7", "-b", "36", p]
        )
        recover.main(["join", p])
        assert capsys.readouterr().out == "31337\n"


def test_main_split_stdout(capsys):
    recover.main(["split", "--split", "2,3", "--secret", "12", "--bits", "8"])
    doc = json.loads(capsys.readouterr().out)
    assert doc["keys"] == {"n": 3, "k": 2}
    assert {doc[k]["base"] for k in ["1", "2", "3"]} == {"10"}
    assert recover.solve(doc) == {"secret": "12"}


@pytest.mark.parametrize(
    "argv",
    [
        ["split", "-s", "4,3", "--secret", "1"],
        ["split", "-s", "3", "--secret", "1"],
        ["split", "-s", "2,3", "--secret", "-1"],
        ["split", "-s", "2,3", "--secret", "1", "-b", "37"],
        ["split", "-s", "2,3", "--secret", "1", "--bits", "0"],
        ["join", "--format", "yaml"],
        [],
    ],
)
def test_main_bad_args(argv):
    with pytest.raises(SystemExit) as e:
        recover.main(argv)
    assert e.value.code == 2


def test_main_debug_log(tmp_path, capsys):
    log = tmp_path / "recover.log"
    recover.main(["--debug", "--log", str(log), "join", data_path("sample1.json")])
    assert capsys.readouterr().out == "3\n"


def test_oversized_numbers_are_reported():
    doc = {"keys": {"k": 1}, "1": {"base": "0" * 4999 + "10", "value": "4"}}
    assert recover.solve(doc) == {"secret": "4"}

    doc["1"]["base"] = "1" * 5000
    rsp = recover.solve(doc)
    assert rsp["error"]["kind"] == "MalformedRecord"
    assert rsp["error"]["key"] == 1

    rsp = recover.solve({"keys": {"k": "5" * 5000}})
    assert rsp["error"]["kind"] == "MalformedRecord"


def test_duplicate_key_in_cbor_record(tmp_path):
    doc = {
        "keys": {"k": 2},
        1: {"base": "10", "value": "4"},
        "1": {"base": "10", "value": "9"},
        2: {"base": "10", "value": "7"},
    }
    assert recover.solve(doc)["error"]["kind"] == "MalformedRecord"

    p = tmp_path / "dup.cbor"
    p.write_bytes(cbor2.dumps(doc))
    with pytest.raises(SystemExit) as e:
        recover.main(["join", str(p)])
    assert e.value.code == 1


def test_huge_non_integer_result_message():
    big = 10**5000 + 1
    doc = {
        "keys": {"k": 2},
        "1": {"base": "10", "value": "0"},
        "3": {"base": "10", "value": recover.render(big)},
    }
    rsp = recover.solve(doc)
    assert rsp["error"]["kind"] == "NonIntegerResult"
    assert "bit integer>/2)" in rsp["error"]["message"]
