#!/usr/bin/env python3
"""
pi-search サーバーに検索 / 桁生成を依頼するスクリプト
"""
import argparse
import sys
import requests


def build_parser():
    parser = argparse.ArgumentParser(
        description="π の桁列を検索 / 生成します"
    )
    parser.add_argument(
        "--base",
        type=str,
        default="http://localhost:8099",
        help="サーバーのベースURL（デフォルト: http://localhost:8099）"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="数字列の出現位置を探す")
    p_search.add_argument("query", help="探す数字列")
    p_search.add_argument(
        "--dataset",
        type=str,
        default="1M",
        help="1M または 1B（デフォルト: 1M）"
    )
    p_search.add_argument(
        "--keep-point",
        action="store_true",
        help="小数点も含めて検索します"
    )
    p_search.add_argument(
        "--strict",
        action="store_true",
        help="見積もりによる打ち切りをせず全ページを走査します"
    )

    p_gen = sub.add_parser("generate", help="π を小数点以下 N 桁まで計算する")
    p_gen.add_argument("number", type=int, help="小数点以下の桁数")
    return parser


def validate(args):
    if args.command == "search":
        allowed = set("0123456789." if args.keep_point else "0123456789")
        if not args.query or not set(args.query) <= allowed:
            return f"query must be a non-empty digit string, got {args.query!r}"
    elif args.number <= 0:
        return f"number must be positive, got {args.number}"
    return None


def main(argv=None):
    args = build_parser().parse_args(argv)

    error = validate(args)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)

    base_url = args.base.rstrip("/")
    session = requests.Session()

    try:
        if args.command == "search":
            params = {"query": args.query, "dataset": args.dataset}
            if args.keep_point:
                params["keep_point"] = "true"
            if args.strict:
                params["strict"] = "true"
            response = session.get(f"{base_url}/pi/search", params=params, timeout=600)
            response.raise_for_status()
            print(response.json()["message"])
        else:
            response = session.get(f"{base_url}/pi/generate",
                                   params={"number": args.number}, timeout=600)
            response.raise_for_status()
            print(response.json()["value"])
    except requests.exceptions.RequestException as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
