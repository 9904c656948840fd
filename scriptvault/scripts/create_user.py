"""
Create a user directly in the object store. Run from project root:
  python -m scriptvault.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m scriptvault.scripts.create_user alice a-secure-password admin
"""
import argparse
import asyncio
import sys

from scriptvault.core.config import get_settings
from scriptvault.core.errors import ServiceError
from scriptvault.core.storage import build_object_store, build_record_store
from scriptvault.services.credentials import CredentialStore


async def _create(username: str, password: str, role: str) -> int:
    settings = get_settings()
    store = build_object_store(settings)
    try:
        credentials = CredentialStore(build_record_store(settings, store))
        user = await credentials.create_user(username, password, role=role, created_by="cli")
    except ServiceError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        await store.aclose()
    print(f"Created user '{user.username}' with role '{user.role}'.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Script Vault user (bypasses access codes).")
    parser.add_argument("username", help="Username (3-64 chars: letters, digits, . _ -)")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    args = parser.parse_args()

    if get_settings().STORAGE_BACKEND == "memory":
        print("STORAGE_BACKEND=memory: the user would vanish on exit. Configure blob storage.", file=sys.stderr)
        return 1
    return asyncio.run(_create(args.username.strip(), args.password, args.role))


if __name__ == "__main__":
    sys.exit(main())
