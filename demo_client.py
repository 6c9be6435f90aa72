#!/usr/bin/env python3
"""Demo client that walks a complaint through the Complaint service HTTP API."""
import os
import sys
import time
import requests

COMPLAINT_URL = os.getenv("COMPLAINT_URL", "http://localhost:5000")

# Smallest valid GIF, enough for the uploads directory to hold a real image.
PIXEL_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00"
    b"\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)


def demo_complaint():
    """Submit a complaint with a photo, list complaints and resolve the newest one."""
    print("\n" + "=" * 70)
    print("🏙️  CIVICFIX DEMO - Complaint Service")
    print("=" * 70)

    complaint = {
        "name": "A",
        "email": "a@x.com",
        "phone": "1",
        "category": "Pothole",
        "description": "Big hole",
        "location": "Main St",
    }

    print("\n📨 Submitting complaint...")
    resp = requests.post(
        f"{COMPLAINT_URL}/api/complaints",
        data=complaint,
        files=[("images", ("pothole.gif", PIXEL_GIF, "image/gif"))],
        timeout=5,
    )
    print(f"  {resp.status_code} {resp.json()['message']}")
    resp.raise_for_status()

    print("\n📋 Complaints (newest first):")
    rows = requests.get(f"{COMPLAINT_URL}/api/complaints", timeout=5).json()
    for row in rows[:5]:
        images = row["imagePaths"].split(",") if row["imagePaths"] else []
        print(f"  #{row['id']:<4} {row['category'] or '-':<14} {row['status']:<10} "
              f"{row['createdAt']}  images={len(images)}")

    newest = rows[0]
    for path in (newest["imagePaths"] or "").split(","):
        if path:
            image = requests.get(f"{COMPLAINT_URL}{path}", timeout=5)
            print(f"\n🖼️  {path}: {image.status_code}, {len(image.content)} bytes")

    print(f"\n✏️  Resolving complaint #{newest['id']}...")
    resp = requests.put(f"{COMPLAINT_URL}/api/complaints/{newest['id']}", json={"status": "Resolved"}, timeout=5)
    print(f"  {resp.status_code} {resp.json()['message']}")

    rows = requests.get(f"{COMPLAINT_URL}/api/complaints", timeout=5).json()
    print(f"  Status now: {rows[0]['status']}")

    print("\n" + "=" * 70)
    print("✅ Demo completed!")
    print("=" * 70)


if __name__ == "__main__":
    print("\nWaiting for the complaint service to be ready...")
    time.sleep(1)

    try:
        resp = requests.get(f"{COMPLAINT_URL}/health", timeout=2)
        if resp.status_code == 200:
            print("✓ Complaint service is ready")
        else:
            print(f"⚠️  Complaint service returned {resp.status_code}")
    except requests.exceptions.RequestException:
        print("\n❌ Complaint service is not responding!")
        print("Start it first: python3 services/complaint/service.py\n")
        sys.exit(1)

    demo_complaint()
