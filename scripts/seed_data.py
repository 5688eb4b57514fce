#!/usr/bin/env python3
"""
Seed script — creates a small dataset for trying the blog API by hand.

Creates:
  • 6 users (password "password123" for all)
  • 3 posts per user, most of them published
  • a few comments and likes across posts

Run against a running API (after `pip install -e .`):
  python scripts/seed_data.py --api-url http://localhost:8000

Accounts that already exist are signed in instead of recreated, so the
script can be re-run.
"""
import argparse
import random
import time

import httpx

from blog_api.client import AuthContext, BlogApiError, BlogClient

PASSWORD = "password123"

BASE_USERS = [
    ("ann@example.com", "Ann Lee"),
    ("bob@example.com", "Bob Martinez"),
    ("carol@example.com", "Carol Singh"),
    ("dave@example.com", "Dave Kim"),
    ("eve@example.com", "Eve Johnson"),
    ("frank@example.com", "Frank Williams"),
]

SAMPLE_POSTS = [
    ("Why I write every morning", "Thirty minutes before the inbox opens changed how I think."),
    ("Notes on async Python", "An event loop is a queue of callbacks with opinions."),
    ("A week without social media", "The first two days were loud. Then it got quiet."),
    ("Designing for the empty state", "Every list starts at zero; design that screen first."),
    ("What sourdough taught me about deadlines", "Some things cannot be rushed, only scheduled."),
    ("Reading code you did not write", "Start from the tests, then the entry point, then the data."),
    ("The case for boring technology", "Pick tools whose failure modes you already know."),
    ("Small teams, long projects", "Write things down. Future you is a new hire."),
    ("On naming things", "A good name removes the need for a comment."),
]

SAMPLE_COMMENTS = [
    "Great read, thanks for sharing!",
    "I had the same experience.",
    "Could you expand on the second point?",
    "Bookmarked.",
    "Strongly disagree, but well argued.",
]


def wait_for_api(http: httpx.Client, retries: int = 15) -> None:
    print(f"Waiting for API at {http.base_url} ...")
    for _ in range(retries):
        try:
            if http.get("/health").json().get("status") == "ok":
                print("  API is ready!\n")
                return
        except httpx.HTTPError:
            pass
        time.sleep(2)
    raise RuntimeError(f"API not reachable at {http.base_url} after {retries} retries")


def sign_in_or_up(http: httpx.Client, email: str, name: str) -> BlogClient:
    client = BlogClient(http, AuthContext())
    try:
        client.signup(email, PASSWORD, name)
        print(f"  ✓ created {email}")
    except BlogApiError as exc:
        if exc.status_code != 400:
            raise
        client.signin(email, PASSWORD)
        print(f"  ✓ signed in {email}")
    return client


def main(api_url: str) -> None:
    with httpx.Client(base_url=api_url, timeout=10.0) as http:
        wait_for_api(http)

        # ── Users ─────────────────────────────────────────────────────────
        print("Creating users...")
        clients = [sign_in_or_up(http, email, name) for email, name in BASE_USERS]

        # ── Posts ─────────────────────────────────────────────────────────
        print("\nCreating posts...")
        post_ids: list[str] = []
        pool = random.sample(SAMPLE_POSTS, k=len(SAMPLE_POSTS))
        idx = 0
        for client in clients:
            for _ in range(3):
                title, content = pool[idx % len(pool)]
                idx += 1
                post = client.create_post(title, content, published=random.random() < 0.8)
                post_ids.append(post["id"])
        print(f"  ✓ {len(post_ids)} posts created")

        # ── Comments & likes ──────────────────────────────────────────────
        print("\nAdding comments and likes...")
        comments = likes = 0
        for post_id in post_ids:
            for client in random.sample(clients, k=random.randint(0, 3)):
                client.add_comment(post_id, random.choice(SAMPLE_COMMENTS))
                comments += 1
            for client in random.sample(clients, k=random.randint(0, 4)):
                client.like(post_id)
                likes += 1
        print(f"  ✓ {comments} comments, {likes} likes added")

    # ── Summary ───────────────────────────────────────────────────────────
    print("\n" + "=" * 60)
    print("Seed complete! Some commands to try:\n")
    print(f"  curl -s '{api_url}/api/v1/blogs' | python3 -m json.tool\n")
    print(f"  curl -s -X POST '{api_url}/api/v1/signin' \\")
    print("    -H 'Content-Type: application/json' \\")
    print(f"    -d '{{\"email\": \"{BASE_USERS[0][0]}\", \"password\": \"{PASSWORD}\"}}'")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the blog API with sample data")
    parser.add_argument("--api-url", default="http://localhost:8000", help="API base URL")
    args = parser.parse_args()
    main(args.api_url)
