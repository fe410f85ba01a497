import os
import sys

import requests

BASE_URL = os.getenv("MARKS_API_URL", "http://localhost:8000")


def fetch_marks(enrollment_number: str, base_url: str = BASE_URL) -> requests.Response:
    return requests.get(
        f"{base_url.rstrip('/')}/marks",
        params={"enrollment_number": enrollment_number},
        timeout=30,
    )


def describe_response(res: requests.Response) -> str:
    if res.status_code == 200:
        data = res.json()
        return f"OK: {data['name']} ({data['course']}, {data['semester']}) - {len(data['subjects'])} subjects"
    if res.status_code == 400:
        return "REJECTED: enrollment number must be 11 digits"
    if res.status_code == 402:
        return "FEES UNPAID: marks withheld"
    if res.status_code == 404:
        return "NOT FOUND: no row for this enrollment number"
    return f"FAILED. Status: {res.status_code}"


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print("usage: python check_marks.py <enrollment_number>")
        return 2

    try:
        res = fetch_marks(argv[1])
    except requests.RequestException as e:
        print(f"Error communicating with backend: {e}")
        return 1

    print(describe_response(res))
    if res.status_code == 200:
        for subject in res.json()["subjects"]:
            print(f"  {subject['name']}: {subject['internal']} + {subject['external']} = {subject['total']}")
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
