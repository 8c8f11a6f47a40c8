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

# Errors raised while reconstructing a secret from a share record.
#
# Every error is a ValueError so callers that only care about "bad input"
# can catch that.  `kind` is the class name and is what gets reported to
# the user along with the message.  Any of an error's `fields` that are set
# are included in as_dict() so the offending values can be reported too.

# Larger integers are shown by size - str() of them hits the interpreter's
# int/str digit limit.
MAX_SHOWN_BITS = 4096


def num(v):
    if v.bit_length() > MAX_SHOWN_BITS:
        return f"<{v.bit_length()} bit integer>"
    return str(v)


class ShareError(ValueError):
    fields = ()

    def __init__(self, message, key=None):
        ValueError.__init__(self, message)
        self.message = message
        self.key = key

    @property
    def kind(self):
        return self.__class__.__name__

    def __str__(self):
        if self.key is None:
            return self.message
        return f"share {self.key}: {self.message}"

    def as_dict(self):
        d = {"kind": self.kind, "message": str(self)}
        if self.key is not None:
            d["key"] = self.key
        for name in self.fields:
            v = getattr(self, name)
            if v is not None:
                d[name] = v
        return d


class InvalidDigit(ShareError):
    fields = ("char", "base")

    def __init__(self, char, base, key=None):
        ShareError.__init__(self, f"invalid digit '{char}' for base {base}", key)
        self.char = char
        self.base = base


class EmptyValue(ShareError):
    def __init__(self, key=None):
        ShareError.__init__(self, "empty value", key)


class MalformedRecord(ShareError):
    pass


class InvalidBase(MalformedRecord):
    fields = ("base",)

    def __init__(self, base, key=None):
        MalformedRecord.__init__(self, f"invalid base {base} - needs to be 2..36", key)
        self.base = base


class MissingThreshold(ShareError):
    pass


class InsufficientShares(ShareError):
    fields = ("needed", "available")

    def __init__(self, needed, available):
        ShareError.__init__(
            self, f"not enough shares - need {needed}, got {available}"
        )
        self.needed = needed
        self.available = available


class DegenerateInterpolation(ShareError):
    fields = ("x", "points")

    def __init__(self, message, x=None, points=None):
        ShareError.__init__(self, message)
        self.x = x
        self.points = points  # [i, j] positions of the colliding points


class NonIntegerResult(ShareError):
    def __init__(self, numerator, denominator):
        ShareError.__init__(
            self,
            "shares do not interpolate to an integer "
            f"({num(numerator)}/{num(denominator)})",
        )
        self.numerator = numerator
        self.denominator = denominator
