"""
Issue a registration access code without logging in. Run from project root:
  python -m scriptvault.scripts.generate_access_code [--days N] [--issuer NAME]
"""
import argparse
import asyncio
import sys
from datetime import UTC, datetime

from scriptvault.core.config import get_settings
from scriptvault.core.errors import ServiceError
from scriptvault.core.storage import build_object_store, build_record_store
from scriptvault.services.access_codes import AccessCodeIssuer
from scriptvault.services.sessions import Session


async def _generate(days: int, issuer_name: str) -> int:
    settings = get_settings()
    store = build_object_store(settings)
    # Stand-in admin identity; the CLI has shell access to the store anyway.
    issuer = Session(token="", username=issuer_name, role="admin", created_at=datetime.now(UTC))
    try:
        issuer_service = AccessCodeIssuer(build_record_store(settings, store))
        code = await issuer_service.generate(issuer, days)
    except ServiceError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        await store.aclose()
    print(f"{code.code} (expires {code.expires_at.isoformat()})")
    return 0


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Generate a single-use Script Vault access code.")
    parser.add_argument("--days", type=int, default=settings.ACCESS_CODE_DEFAULT_VALID_DAYS)
    parser.add_argument("--issuer", default=settings.ADMIN_USERNAME, help="Recorded as created_by")
    args = parser.parse_args()

    if settings.STORAGE_BACKEND == "memory":
        print("STORAGE_BACKEND=memory: the code would vanish on exit. Configure blob storage.", file=sys.stderr)
        return 1
    return asyncio.run(_generate(args.days, args.issuer))


if __name__ == "__main__":
    sys.exit(main())
