"""
Add or remove an address on the ban list. Run from project root:
  python -m filedrop.scripts.ban_ip 10.0.0.5
  python -m filedrop.scripts.ban_ip 10.0.0.5 --remove
Addresses are matched exactly as given; no CIDR ranges.
"""
import argparse
import sys

from filedrop.core.database import SessionLocal
from filedrop.models import BannedIP
from filedrop.services.access_gate import is_origin_banned


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manage the filedrop IP ban list.")
    parser.add_argument("ip", help="Exact address string to ban (max 50 chars)")
    parser.add_argument("--remove", action="store_true", help="Lift the ban instead")
    args = parser.parse_args(argv)

    ip = args.ip
    if not ip or len(ip) > 50:
        print("Invalid address length.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        if args.remove:
            rows = db.query(BannedIP).filter(BannedIP.ip == ip).all()
            exact = [row for row in rows if row.ip == ip]
            for row in exact:
                db.delete(row)
            removed = len(exact)
            db.commit()
            print(f"Removed {removed} ban entr{'y' if removed == 1 else 'ies'} for {ip}.")
            return 0
        if is_origin_banned(db, ip):
            print(f"{ip} is already banned.")
            return 0
        db.add(BannedIP(ip=ip))
        db.commit()
        print(f"Banned {ip}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
