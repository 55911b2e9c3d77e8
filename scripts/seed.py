#!/usr/bin/env python3
"""
Load demo songs, venues and setlists into the durable database.

Usage:
  python scripts/seed.py [--owner mick-jagger] [--handle "Mick Jagger"]

Running it again replaces the owner's previous demo data.
"""
from __future__ import annotations

import argparse
import json
import sys

from gigbook.db.create_tables import create_all
from gigbook.repositories import SQLRepository

SONG_TITLES = [
    "(I Can't Get No) Satisfaction",
    "Gimme Shelter",
    "Sympathy for the Devil",
    "Paint It Black",
    "Brown Sugar",
    "Jumpin' Jack Flash",
    "Start Me Up",
    "Angie",
    "Wild Horses",
    "You Can't Always Get What You Want",
]

VENUES = [
    ("Madison Square Garden", "New York, NY, USA"),
    ("Wembley Stadium", "London, UK"),
    ("Hyde Park", "London, UK"),
    ("The O2 Arena", "London, UK"),
    ("Tokyo Dome", "Tokyo, Japan"),
]

GREATEST_HITS = [
    "(I Can't Get No) Satisfaction",
    "Gimme Shelter",
    "Sympathy for the Devil",
    "Paint It Black",
    "Brown Sugar",
    "You Can't Always Get What You Want",
    "Jumpin' Jack Flash",
    "Start Me Up",
]
ACOUSTIC_SET = ["Angie", "Wild Horses"]


def clear_owner(repo: SQLRepository, owner: str) -> None:
    for store in (repo.songs, repo.venues, repo.setlists):
        for record in store.list(owner):
            store.delete(owner, record.id)


def seed(repo: SQLRepository, owner: str, handle: str) -> dict:
    repo.users.ensure(owner, handle=handle)
    repo.users.update(owner, {"handle": handle})
    clear_owner(repo, owner)

    songs = [repo.songs.create(owner, {"title": title}) for title in SONG_TITLES]
    venues = [repo.venues.create(owner, {"name": name, "address": address}) for name, address in VENUES]
    by_title = {song.title: song.id for song in songs}

    def items(titles: list[str], notes: str, mood: str) -> list[dict]:
        return [
            {"song_id": by_title[t], "notes": notes, "mood_tags": [mood]}
            for t in titles
            if t in by_title
        ]

    setlists = [
        repo.setlists.create(owner, {"name": f"{handle} - Greatest Hits", "items": items(GREATEST_HITS, "classic", "rock")}),
        repo.setlists.create(owner, {"name": f"{handle} - Acoustic Set", "items": items(ACOUSTIC_SET, "acoustic", "acoustic")}),
    ]
    return {"user": owner, "songs": len(songs), "venues": len(venues), "setlists": len(setlists)}


def main() -> None:
    ap = argparse.ArgumentParser(description="Seed demo data into the durable database")
    ap.add_argument("--owner", default="mick-jagger", help="Owner identity to seed (default: mick-jagger)")
    ap.add_argument("--handle", default="Mick Jagger", help="Display handle for the owner")
    args = ap.parse_args()

    owner = (args.owner or "").strip()
    if not owner:
        raise SystemExit("Invalid owner")
    create_all()
    summary = seed(SQLRepository(), owner, args.handle)
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
