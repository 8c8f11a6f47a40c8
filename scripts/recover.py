#! /usr/bin/env python3

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

# Recover the secret f(0) from a share record.
#
# Example usage:
# ./recover.py split --split 3,4 --secret 1234 -b 10 -b 2 -b 16 shares.json
# ./recover.py join shares.json
# ./recover.py join --json < shares.json
# ./recover.py split --split 7,10 --secret 42 --format cbor shares.cbor
# ./recover.py --debug join shares.cbor
#
# The first k shares by ascending key are used.  Any remaining shares are
# ignored - they are not checked against the recovered polynomial.

import argparse
import json
import logging
import sys

import errors
import radix
import rational
import shareset
import sss

DEFAULT_BASE = 10


def render(v):
    # Canonical base 10 - no leading zeros, "-" only when negative.
    if v < 0:
        return "-" + radix.encode(-v, 10)
    return radix.encode(v, 10)


def validate(ss):
    if ss.k is None or ss.k <= 0:
        raise errors.MissingThreshold(f"threshold k must be positive, got {ss.k}")
    if len(ss.shares) < ss.k:
        raise errors.InsufficientShares(ss.k, len(ss.shares))


def select(ss):
    return sorted(ss.shares)[: ss.k]


def convert(share):
    try:
        return share.key, radix.decode(share.digits, share.base)
    except errors.ShareError as e:
        e.key = share.key
        raise


def points(ss):
    xy = []
    for key in select(ss):
        x, y = convert(ss.shares[key])
        logging.debug(
            f"share {x}: base {ss.shares[key].base} -> {y.bit_length()} bit value"
        )
        xy.append((x, y))
    return xy


def reconstruct(ss):
    logging.debug(f"validating record n={ss.n} k={ss.k} shares={len(ss.shares)}")
    validate(ss)
    xy = points(ss)
    logging.debug(f"interpolating at 0 with x = {[x for x, _ in xy]}")
    secret = render(sss.interpolate(xy))
    logging.debug(f"secret: {secret}")
    return secret


def solve(doc):
    # Returns {"secret": "..."} or {"error": {"kind": ..., "message": ...}}
    try:
        return {"secret": reconstruct(shareset.parse(doc))}
    except errors.ShareError as e:
        logging.debug(f"reconstruction failed: {e.kind}: {e}")
        return {"error": e.as_dict()}


def deal(secret, k, n, bases, bits=rational.DEFAULT_BITS):
    q = rational.Q(bits)
    xy = sss.split(q(secret), k, n)
    return shareset.make(k, [(int(x), int(y)) for x, y in xy], bases)


def read_record(fname, fmt):
    if fname is None or fname == "-":
        data = sys.stdin.buffer.read()
        return shareset.loads(data, fmt or "json")
    try:
        return shareset.loadf(fname, fmt)
    except OSError as e:
        print(f"error: unable to read {fname}: {e.strerror}")
        sys.exit(1)


def join(args):
    try:
        rsp = solve(read_record(args.file, args.format))
    except errors.ShareError as e:
        rsp = {"error": e.as_dict()}

    if args.json:
        print(json.dumps(rsp))
    elif "secret" in rsp:
        print(rsp["secret"])
    else:
        print(f"error: {rsp['error']['kind']}: {rsp['error']['message']}")
    if "error" in rsp:
        sys.exit(1)


def split_cmd(args):
    k, n = args.split
    bases = args.base or [DEFAULT_BASE]
    ss = deal(args.secret, k, n, bases, args.bits)
    fmt = args.format
    if args.file is None or args.file == "-":
        fmt = fmt or "json"
        if fmt == "cbor":
            sys.stdout.buffer.write(shareset.dumps(ss, fmt))
        else:
            shareset.dump(sys.stdout, ss, fmt)
    else:
        try:
            shareset.dumpf(args.file, ss, fmt)
        except OSError as e:
            print(f"error: unable to write {args.file}: {e.strerror}")
            sys.exit(1)


def split(string):
    # takes a string of the form k,n and returns a list ints [k, n]
    # otherwise raises an argument error
    try:
        k, n = [int(v) for v in string.split(",")]
    except Exception:
        raise argparse.ArgumentTypeError(
            f"invalid split({string}) - needs to be in form [K],[N]"
        )
    if k <= 0 or n <= 0 or k > n:
        raise argparse.ArgumentTypeError(f"invalid k({k}) or n({n})")
    return [k, n]


def radix_base(string):
    try:
        return radix.check_base(int(string))
    except (ValueError, errors.InvalidBase):
        raise argparse.ArgumentTypeError(
            f"invalid base({string}) - needs to be {radix.MIN_BASE}..{radix.MAX_BASE}"
        )


def non_negative(string):
    try:
        v = int(string)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid secret({string})")
    if v < 0:
        raise argparse.ArgumentTypeError(f"invalid secret({string}) - must be >= 0")
    return v


def positive(string):
    try:
        v = int(string)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid value({string})")
    if v <= 0:
        raise argparse.ArgumentTypeError(f"invalid value({string}) - must be > 0")
    return v


def make_parser():
    parser = argparse.ArgumentParser("recover")
    parser.add_argument("--debug", action="store_true", help="debug output")
    parser.add_argument("--log", help="write log to [LOG] instead of stderr")

    sub = parser.add_subparsers(required=True, dest="cmd")
    sp = sub.add_parser("join", help="recover the secret from a share record")
    sp.add_argument(
        "-f",
        "--format",
        choices=shareset.FORMATS,
        help="record format - defaults to cbor for *.cbor files otherwise json",
    )
    sp.add_argument(
        "-j", "--json", action="store_true", help="print result/error as JSON"
    )
    sp.add_argument("file", nargs="?", help="record to read - stdin if omitted")

    sp = sub.add_parser("split", help="split a secret into a share record")
    sp.add_argument(
        "-s",
        "--split",
        type=split,
        required=True,
        help="[K],[N] - split secret into [N] shares with quarum of [K]",
    )
    sp.add_argument(
        "--secret", type=non_negative, required=True, help="non-negative integer secret"
    )
    sp.add_argument(
        "-b",
        "--base",
        type=radix_base,
        action="append",
        help="base to write share values in - repeat to cycle through several",
    )
    sp.add_argument(
        "--bits",
        type=positive,
        default=rational.DEFAULT_BITS,
        help="size in bits of the random polynomial coefficients",
    )
    sp.add_argument(
        "-f",
        "--format",
        choices=shareset.FORMATS,
        help="record format - defaults to cbor for *.cbor files otherwise json",
    )
    sp.add_argument("file", nargs="?", help="output record to [FILE] - stdout if omitted")
    return parser


def main(argv=None):
    args = make_parser().parse_args(argv)
    logging.basicConfig(
        filename=args.log, level=logging.DEBUG if args.debug else logging.WARNING
    )

    if args.cmd == "join":
        join(args)
    elif args.cmd == "split":
        split_cmd(args)
    else:
        print(f"error: unknown cmd: {args.cmd}")
        sys.exit(1)


if __name__ == "__main__":
    main()
