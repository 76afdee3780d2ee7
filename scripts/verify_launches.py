import httpx
import time
import sys
import subprocess
import os

HOST = os.getenv("LAUNCHCACHE_URL", "http://127.0.0.1:8080")
BASE_URL = f"{HOST}/api/v1/launches"

def check_backend():
    try:
        r = httpx.get(f"{HOST}/health", timeout=2)
        return r.status_code == 200
    except httpx.HTTPError:
        return False

def start_backend():
    print("Starting temporary backend...")
    p = subprocess.Popen([sys.executable, "-m", "uvicorn", "launchcache.main:app", "--host", "127.0.0.1", "--port", "8080"],
                         cwd=os.path.join(os.getcwd(), "backend"),
                         stdout=subprocess.PIPE,
                         stderr=subprocess.PIPE)
    for i in range(20):
        if check_backend():
            print("Backend started.")
            return p
        time.sleep(1)
    print("Backend failed to start.")
    return None

def verify_launches():
    try:
        # 1. Cold query goes upstream
        query = {"name": "Falcon", "limit": 3, "sort": "asc"}
        print(f"Testing launch query {query}...")
        r_miss = httpx.get(BASE_URL, params=query, timeout=30)
        if r_miss.status_code != 200:
            print(f"[FAIL] Query failed: {r_miss.status_code}")
            return

        data = r_miss.json()
        print(f"[PASS] Retrieved {data['count']} launches (X-Cache: {r_miss.headers.get('x-cache')}).")
        for launch in data["launches"]:
            print(f"  {launch['date_utc']}  {launch['name']}")

        # 2. Same filters, different ordering and casing, must be served from cache
        print("\nTesting cache hit with reordered parameters...")
        r_hit = httpx.get(f"{BASE_URL}?SORT=ASC&limit=3&name=%20falcon%20", timeout=10)
        if r_hit.headers.get("x-cache") == "HIT" and r_hit.content == r_miss.content:
            print("[PASS] Served identical payload from cache.")
        else:
            print(f"[FAIL] Expected cached identical payload, got X-Cache={r_hit.headers.get('x-cache')}")

        # 3. Malformed filters degrade to defaults
        print("\nTesting permissive parsing...")
        r_bad = httpx.get(BASE_URL, params={"success": "maybe", "limit": "lots", "from": "yesterday"}, timeout=30)
        if r_bad.status_code == 200 and r_bad.json()["filters"]["limit"] == 10:
            print("[PASS] Malformed filters fell back to defaults.")
        else:
            print(f"[FAIL] Malformed filters were rejected: {r_bad.status_code}")

        health = httpx.get(f"{HOST}/health", timeout=2).json()
        print(f"\nCache stats: {health['cache']}")

    except Exception as e:
        print(f"Test failed with exception: {e}")

if __name__ == "__main__":
    server_process = None
    if not check_backend():
        server_process = start_backend()

    if check_backend():
        verify_launches()
    else:
        print("Could not connect to backend.")

    if server_process:
        print("Stopping temporary backend...")
        server_process.terminate()
