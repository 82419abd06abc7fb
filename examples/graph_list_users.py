#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import os

from meridian.graph import ApiVersion, GetRequestInput, GraphClient, StaticTokenAuthorizer, Uri


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="List directory users, following every page")
    p.add_argument("--top", type=int, default=100, help="page size requested from the API")
    p.add_argument("--beta", action="store_true", help="use the beta API version")
    p.add_argument("--no-paging", action="store_true", help="only fetch the first page")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    token = os.environ["MERIDIAN_GRAPH_TOKEN"]
    version = ApiVersion.BETA if args.beta else ApiVersion.V1

    async with GraphClient(version, authorizer=StaticTokenAuthorizer(token)) as client:
        result = await client.get(
            GetRequestInput(
                uri=Uri("/users", params={"$top": str(args.top), "$select": "id,displayName"}),
                disable_paging=args.no_paging,
            )
        )

    users = result.envelope.value or []
    print("=" * 65)
    print(f"Status     : {result.status_code}")
    print(f"Users      : {len(users)}")
    print("=" * 65)
    for user in users:
        print(f"{user['id']:38} | {user.get('displayName') or ''}")


if __name__ == "__main__":
    asyncio.run(main())
