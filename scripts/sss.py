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

# See https://en.wikipedia.org/wiki/Shamir's_secret_sharing

# Works over any field whose elements provide .field, + - * and inverse().
# rational.py gives exact arithmetic over the integers/rationals which is
# what share records use.

# NOTES:
#
# 1. join() does not check that the splits are consistent.  If incorrect
# splits are provided an output will be computed that is incorrect.  Over Q
# inconsistent splits often (but not always) show up as a non-integer
# result which interpolate() reports as NonIntegerResult.
#
# 2. If more splits are provided than required for quarum the result is
# still correct as long as all of them lie on the same polynomial.
#
# 3. Each Lagrange term is computed as one fraction and the terms are
# summed exactly.  Only the final sum is required to be an integer.

# Typical Usage:
#
#  q = rational.Q()
#  r = split(q(1234), 3, 5)
#
#  # Recover secret from a quarum - could be any 3 values from r
#  rs = join(r[:3])
#
#  # rs == q(1234)
#
#  # or directly on integer points
#  interpolate([(1, 4), (2, 7), (3, 12)]) == 3

import errors
import rational


def randpoly(a0, n):
    field = a0.field
    while True:
        p = [a0] + [field.random() for _ in range(n - 1)]
        if n == 1 or p[-1] != field(0):
            return p


def evalpoly(x, p):
    r = x.field(0)
    for c in p[::-1]:
        r = r * x + c
    return r


def lp_i(x, xi, xv):
    num, den = x.field(1), x.field(1)
    for xj in xv:
        num = num * (x - xj)
        den = den * (xi - xj)
    return num * den.inverse()


def lagrange(x, xy):
    xv, yv = zip(*xy)
    e = [yv[i] * lp_i(x, xv[i], xv[:i] + xv[i + 1 :]) for i in range(len(xy))]
    f = x.field(0)
    for ei in e:
        f = f + ei
    return f


def check_distinct(xv):
    # xv are ints or field elements - anything comparable with ==
    for i in range(len(xv)):
        for j in range(i):
            if xv[i] == xv[j]:
                raise errors.DegenerateInterpolation(
                    f"points {j} and {i} share x = {xv[i]}", xv[i], [j, i]
                )


def split(s, k, n):
    # s is a secret represented in a field
    # k is the quarum
    # n is to the total number of splits
    # returns [(x_fe, y_fe)] of length n
    #         x/y are the points the polynomial was evaluatated at.
    if k <= 0 or n <= 0 or k > n:
        raise ValueError(f"invalid k({k}) or n({n})")
    p = randpoly(s, k)
    return [(s.field(v), evalpoly(s.field(v), p)) for v in range(1, n + 1)]


def join(xy):
    # xy is [(x_fe, y_fe)] of length k - the quarum
    #       x/y are the points the polynomial was evaluatated at.
    # returns the secret in the field
    if len(xy) == 0:
        raise errors.DegenerateInterpolation("no points to interpolate")
    check_distinct([x for x, _ in xy])
    return lagrange(xy[0][0].field(0), xy)


def interpolate(points):
    # points is [(x, y)] of ints
    # returns f(0) as an int
    check_distinct([x for x, _ in points])
    q = rational.Q()
    f = join([(q(x), q(y)) for x, y in points])
    if not f.is_integer():
        raise errors.NonIntegerResult(f.numerator, f.denominator)
    return int(f)
