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

# The field of rational numbers, exposed with the same element protocol
# sss.py expects from a finite field (x.field, + - * /, inverse()).
#
# Values are kept exact as fractions.Fraction - numerator and denominator
# are always in lowest terms with a positive denominator.  Nothing is ever
# rounded so interpolating integer shares gives an exact answer.

import secrets
from fractions import Fraction

# Bits used for random coefficients when splitting.
DEFAULT_BITS = 128


class Q:
    def __init__(self, bits=DEFAULT_BITS):
        self.bits = bits

    def __call__(self, v):
        return QFE(v, self)

    def __repr__(self):
        return f"Q({self.bits})"

    def __eq__(self, o):
        # There is only one field of rationals - bits only affects random()
        return self.__class__ == o.__class__

    def random(self):
        return self(secrets.randbelow(2**self.bits))


class QFE:
    def __init__(self, v, q):
        self.q = q
        self.field = q
        if isinstance(v, bool) or not isinstance(v, (int, Fraction)):
            raise TypeError(f"{v!r} not a member of {q}")
        self.v = Fraction(v)

    def __repr__(self):
        return f"QFE({self.v}, {self.q})"

    def __str__(self):
        return str(self.v)

    def _check(self, o, op):
        if self.__class__ != o.__class__:
            raise TypeError(f"Can't {op} non FE values")
        if self.q != o.q:
            raise TypeError(f"Can't {op} elements of different fields")

    def __eq__(self, o):
        if self.__class__ != o.__class__:
            raise TypeError("Can't compare non FE values")
        return self.q == o.q and self.v == o.v

    def __add__(self, o):
        self._check(o, "add")
        return self.q(self.v + o.v)

    def __sub__(self, o):
        self._check(o, "sub")
        return self.q(self.v - o.v)

    def __neg__(self):
        return self.q(-self.v)

    def __mul__(self, o):
        self._check(o, "mult")
        return self.q(self.v * o.v)

    def __truediv__(self, o):
        self._check(o, "div")
        return self * o.inverse()

    def inverse(self):
        if self.v == 0:
            raise ZeroDivisionError("0 has no inverse")
        return self.q(1 / self.v)

    @property
    def numerator(self):
        return self.v.numerator

    @property
    def denominator(self):
        return self.v.denominator

    def is_integer(self):
        return self.v.denominator == 1

    def __int__(self):
        if not self.is_integer():
            raise ValueError(f"{self.v} is not an integer")
        return self.v.numerator
