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

# Positional numerals in base 2..36.
#
# Digits are 0-9 then a-z.  Decoding is case-insensitive, encoding always
# produces lowercase with no leading zeros.
#
# Unlike int(s, base) no sign, whitespace, underscores or 0x/0o/0b prefixes
# are accepted, and the value is not subject to the interpreter's limit on
# the number of digits in int/str conversions.

import errors

MIN_BASE = 2
MAX_BASE = 36

digits = "0123456789abcdefghijklmnopqrstuvwxyz"
rev_digits = {k: v for v, k in enumerate(digits)}
rev_digits.update({k.upper(): v for k, v in rev_digits.items()})


def check_base(base):
    if isinstance(base, bool) or not isinstance(base, int):
        raise errors.InvalidBase(base)
    if base < MIN_BASE or base > MAX_BASE:
        raise errors.InvalidBase(base)
    return base


def decode(s, base):
    check_base(base)
    if len(s) == 0:
        raise errors.EmptyValue()
    v = 0
    for c in s:
        d = rev_digits.get(c)
        if d is None or d >= base:
            raise errors.InvalidDigit(c, base)
        v = v * base + d
    return v


def encode(v, base):
    check_base(base)
    if v < 0:
        raise ValueError(f"can't encode negative value {v}")
    if v == 0:
        return "0"
    r = []
    while v > 0:
        v, d = divmod(v, base)
        r.append(digits[d])
    return "".join(r[::-1])
