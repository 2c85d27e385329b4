#!/usr/bin/env python3
"""
Prepare the data directory and optionally import a seed/backup document.

Usage:
  python scripts/init_data.py [--data-dir data/db] [--seed backup.json] [--snapshot]
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from mediadb.core.config import get_settings
from mediadb.core.logging import configure_logging
from mediadb.repositories.collection_store import CollectionStore


def main() -> None:
    ap = argparse.ArgumentParser(description="Initialize MediaDB collections")
    ap.add_argument("--data-dir", help="Data directory (default: MEDIADB_DATA_DIR or ./data/db)")
    ap.add_argument("--seed", help="JSON document keyed by collection name (same shape as /api/backup)")
    ap.add_argument("--snapshot", action="store_true", help="Take an on-disk snapshot before importing")
    args = ap.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)
    data_dir = Path(args.data_dir).resolve() if args.data_dir else settings.data_dir
    store = CollectionStore(data_dir)

    created = store.initialize()
    print(f"OK: data dir {data_dir}")
    if created:
        print(f"  Created: {', '.join(created)}")

    if args.seed:
        seed_path = Path(args.seed)
        if not seed_path.is_file():
            raise SystemExit(f"Seed file '{seed_path}' not found")
        payload = json.loads(seed_path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise SystemExit("Seed file must contain a JSON object keyed by collection")
        if args.snapshot:
            print(f"  Snapshot: {store.create_snapshot().name}")
        restored = store.restore_collections(payload)
        print(f"  Imported: {', '.join(restored) or '(nothing)'}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
