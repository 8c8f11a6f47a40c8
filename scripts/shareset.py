# © 2025 Unit Circle Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# Share records.
#
# A record is a document (JSON or CBOR) of the form:
#
#   {
#     "keys": {"n": 4, "k": 3},
#     "1": {"base": "10", "value": "4"},
#     "2": {"base": "2", "value": "111"},
#     ...
#   }
#
# Every field other than "keys" is a share.  The field name is the x
# coordinate and must be a positive decimal integer.  "base" may be a
# number or a string holding one, "value" is the y coordinate written in
# that base.
#
# parse() turns a decoded document into a ShareSet without converting any
# values - that is left to the reconstruction so a bad digit is reported
# against the share it came from.

import json
import logging
from collections import namedtuple

import cbor2

import errors
import radix

KEYS = "keys"
FORMATS = ("json", "cbor")

# base, k, n and share keys larger than this are rejected
MAX_INT_BITS = 1024
MAX_INT_DIGITS = 309  # decimal digits in a MAX_INT_BITS integer

Share = namedtuple("Share", ["key", "base", "digits"])
ShareSet = namedtuple("ShareSet", ["n", "k", "shares"])  # shares: {key: Share}


def _check_size(v, what):
    if v.bit_length() > MAX_INT_BITS:
        raise errors.MalformedRecord(f"{what} is too large")
    return v


def _int(v, what):
    # Accepts ints and strings of decimal digits, rejects bools/floats/etc.
    if isinstance(v, bool):
        raise errors.MalformedRecord(f"{what} must be an integer, got {v!r}")
    if isinstance(v, int):
        return _check_size(v, what)
    if isinstance(v, str):
        s = v.strip()
        if s[:1] in ("+", "-"):
            sign, s = s[0], s[1:]
        else:
            sign = ""
        if s.isdigit() and s.isascii():
            s = s.lstrip("0") or "0"
            if len(s) > MAX_INT_DIGITS:
                raise errors.MalformedRecord(f"{what} is too large")
            return _check_size(int(sign + s), what)
    raise errors.MalformedRecord(f"{what} must be an integer, got {v!r}")


def parse_key(name):
    # name is the field name - a str, or an int in CBOR records
    if isinstance(name, int) and not isinstance(name, bool):
        key = _check_size(name, "share key")
    elif isinstance(name, str):
        if not (name.isascii() and name.isdigit()) or name.startswith("0"):
            raise errors.MalformedRecord(
                f"share key {name[:40]!r} is not a positive integer"
            )
        if len(name) > MAX_INT_DIGITS:
            raise errors.MalformedRecord("share key is too large")
        key = _check_size(int(name), "share key")
    else:
        raise errors.MalformedRecord(f"share key {name!r} is not a string")
    if key <= 0:
        raise errors.MalformedRecord(f"share key {key} is not a positive integer")
    return key


def parse_share(key, item):
    if not isinstance(item, dict):
        raise errors.MalformedRecord(f"share {key} must be an object", key)
    if "base" not in item:
        raise errors.MalformedRecord("missing base", key)
    if "value" not in item:
        raise errors.MalformedRecord("missing value", key)
    try:
        base = _int(item["base"], "base")
    except errors.MalformedRecord as e:
        e.key = key
        raise
    digits = item["value"]
    if not isinstance(digits, str):
        raise errors.MalformedRecord(
            f"value must be a string of digits, got {digits!r}", key
        )
    return Share(key, base, digits)


def parse(doc):
    if not isinstance(doc, dict):
        raise errors.MalformedRecord("record must be an object")
    keys = doc.get(KEYS)
    if not isinstance(keys, dict):
        raise errors.MalformedRecord(f'missing or invalid "{KEYS}"')

    if keys.get("k") is None:
        raise errors.MissingThreshold("threshold k is missing")
    k = _int(keys["k"], "k")
    if k <= 0:
        raise errors.MissingThreshold(f"threshold k must be positive, got {k}")

    n = keys.get("n")
    if n is not None:
        n = _int(n, "n")

    shares = {}
    for name, item in doc.items():
        if name == KEYS:
            continue
        key = parse_key(name)
        if key in shares:
            # e.g. both 1 and "1" in a CBOR record
            raise errors.MalformedRecord(f"duplicate share key {key}", key)
        shares[key] = parse_share(key, item)

    if n is None:
        n = len(shares)
    elif n != len(shares):
        logging.warning(f"record declares n={n} but has {len(shares)} shares")
    if k > n:
        logging.warning(f"record declares k={k} greater than n={n}")
    return ShareSet(n, k, shares)


def make(k, points, bases):
    # points is [(x, y)] of non-negative ints
    # bases is a list of bases cycled over the points
    shares = {}
    for i, (x, y) in enumerate(points):
        base = bases[i % len(bases)]
        shares[x] = Share(x, base, radix.encode(y, base))
    return ShareSet(len(shares), k, shares)


def to_doc(ss):
    doc = {KEYS: {"n": ss.n, "k": ss.k}}
    for key in sorted(ss.shares):
        s = ss.shares[key]
        doc[str(key)] = {"base": str(s.base), "value": s.digits}
    return doc


def check_format(fmt):
    if fmt not in FORMATS:
        raise ValueError(f"unknown format {fmt} - needs to be one of {FORMATS}")


def guess_format(fname):
    if fname and fname.lower().endswith(".cbor"):
        return "cbor"
    return "json"


def loads(data, fmt="json"):
    check_format(fmt)
    try:
        if fmt == "cbor":
            return cbor2.loads(data)
        if isinstance(data, bytes):
            data = data.decode("utf8")
        return json.loads(data)
    except UnicodeDecodeError as e:
        raise errors.MalformedRecord(f"invalid text: {e}")
    except json.JSONDecodeError as e:
        raise errors.MalformedRecord(f"invalid JSON: {e}")
    except cbor2.CBORDecodeError as e:
        raise errors.MalformedRecord(f"invalid CBOR: {e}")


def load(f, fmt="json"):
    return loads(f.read(), fmt)


def dumps(ss, fmt="json"):
    check_format(fmt)
    doc = to_doc(ss)
    if fmt == "cbor":
        return cbor2.dumps(doc)
    return json.dumps(doc, indent=2) + "\n"


def dump(f, ss, fmt="json"):
    f.write(dumps(ss, fmt))


def loadf(fname, fmt=None):
    if fmt is None:
        fmt = guess_format(fname)
    with open(fname, "rb") as f:
        return load(f, fmt)


def dumpf(fname, ss, fmt=None):
    if fmt is None:
        fmt = guess_format(fname)
    if fmt == "cbor":
        with open(fname, "wb") as f:
            dump(f, ss, fmt)
    else:
        with open(fname, "wt") as f:
            dump(f, ss, fmt)
