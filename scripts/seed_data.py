#!/usr/bin/env python3
"""
Seed script: populate a running API with sample records.

Usage:
    uvicorn tagnotes.main:app &
    python scripts/seed_data.py
"""

import requests

API_URL = "http://localhost:8000/api/v1"
API_KEY = "dev-api-key-change-in-production"
HEADERS = {"X-API-Key": API_KEY, "Content-Type": "application/json"}

# Every word becomes a tag; the last two share a tag set and the second one is rejected
RECORDS = [
    "python fastapi backend",
    "python sqlalchemy asyncio",
    "javascript react frontend",
    "java spring backend",
    "Café crème Paris",
    "ÜBER Straße München",
    "postgres index tuning",
    "docker compose postgres",
    "reading list: not-a-tag-with-colon but words count",
    "backend python fastapi",
]


def create_record(content):
    """Create a record via API."""
    response = requests.post(f"{API_URL}/records", headers=HEADERS, json={"content": content})
    if response.status_code == 201:
        return response.json()
    error = response.json().get("error", {})
    print(f"  ⚠️ {content[:40]!r}: {error.get('code')} {error.get('message')}")
    return None


def main():
    print("=" * 60)
    print("Seeding database with sample records")
    print("=" * 60)

    created = 0
    for content in RECORDS:
        record = create_record(content)
        if record:
            created += 1
            print(f"  ✅ {content[:50]} ({len(record['tag_ids'])} tags)")

    cloud = requests.get(f"{API_URL}/tags/cloud", headers=HEADERS, params={"limit": 5})
    if cloud.ok:
        print("\n🏷️  Top tags:")
        for item in cloud.json():
            print(f"    {item['normalized_value']}: {item['usage_count']}")

    print("\n" + "=" * 60)
    print(f"✅ Done! Created {created} of {len(RECORDS)} records")
    print("=" * 60)


if __name__ == "__main__":
    main()
