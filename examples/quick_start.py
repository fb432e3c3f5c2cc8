#!/usr/bin/env python3
# Example usage of json_file_db

from json_file_db import open_database


def main() -> None:
    # Creates ./demo_db/ if missing; each collection is ./demo_db/<name>.json
    db = open_database("demo_db")
    users = db.collection("users")

    # Insert: id is generated when the record has none
    rec = users.insert({"name": "Alice", "age": 33})
    print("Inserted:", rec, "last id:", users.last_insert_id())
    users.insert({"id": "bob", "name": "Bob", "age": 17})

    # Fetch it back by id
    print("Loaded:", users.get(rec["id"]))

    # Flat equality query
    for r in users.find({"age": 33}):
        print("Age 33:", r["name"])

    # Update returns the whole collection after the patch
    everyone = users.update({"name": "Alice"}, {"age": 34})
    print("After update:", everyone)

    # Delete returns the removed records
    removed = users.delete({"id": "bob"})
    print("Deleted:", removed)


if __name__ == "__main__":
    main()
