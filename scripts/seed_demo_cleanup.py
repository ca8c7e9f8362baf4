import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from kupong.coupons import delete_coupon, list_coupons
from kupong.db import init_db


SEED_COUPON_PREFIX = "[DEMO]"


def main():
    parser = argparse.ArgumentParser(description="Remove seeded demo coupons and everything they own.")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    init_db()
    seeded = [c for c in list_coupons() if c.title.startswith(SEED_COUPON_PREFIX)]
    if not seeded:
        print("No demo coupons found.")
        return

    for coupon in seeded:
        if args.dry_run:
            print(f"Would delete {coupon.title}")
        else:
            delete_coupon(coupon.id)
            print(f"Deleted {coupon.title}")


if __name__ == "__main__":
    main()
