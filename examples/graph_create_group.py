#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import os

from meridian.graph import (
    ApiVersion,
    GetRequestInput,
    GraphClient,
    PostRequestInput,
    StaticTokenAuthorizer,
    Uri,
    retry_on_404,
)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create a security group and read it back")
    p.add_argument("name")
    p.add_argument("--tenant", default=os.environ.get("MERIDIAN_GRAPH_TENANT", ""))
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    token = os.environ["MERIDIAN_GRAPH_TOKEN"]
    body = {
        "displayName": args.name,
        "mailEnabled": False,
        "mailNickname": args.name.replace(" ", "-").lower(),
        "securityEnabled": True,
    }

    async with GraphClient(
        ApiVersion.V1, args.tenant, authorizer=StaticTokenAuthorizer(token)
    ) as client:
        created = await client.post(
            PostRequestInput(uri=Uri("/groups"), body=json.dumps(body).encode())
        )
        group_id = created.json()["id"]

        # A freshly created group can 404 for a few seconds
        fetched = await client.get(
            GetRequestInput(
                uri=Uri(f"/groups/{group_id}"),
                consistency_failure_func=retry_on_404,
            ),
            deadline=120,
        )

    print(json.dumps(fetched.json(), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
