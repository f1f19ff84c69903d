#!/usr/bin/env python3
"""
Complete rental flow script: book, pay, pick up and return a product.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_book_and_pay.py --product-id <UUID> --start 2026-04-01 --end 2026-04-04
    python scripts/flow_book_and_pay.py --product-id <UUID> --start 2026-04-01 --end 2026-04-04 --quantity 2 --cash

Flow:
    1. Login as customer
    2. Calculate rental price
    3. Create booking
    4. Pay for the booking
    5. Login as staff
    6. Mark booking as picked up
    7. Mark booking as returned
"""

import argparse
import json
import sys

import httpx

BASE_URL = "http://localhost:8000"

# Test credentials
CUSTOMER_EMAIL = "customer@rentflow.local"
CUSTOMER_PASSWORD = "Test@1234"
STAFF_EMAIL = "admin@rentflow.local"
STAFF_PASSWORD = "Admin@123"


def login(email: str, password: str) -> tuple[str, dict]:
    """Login and return the token and user profile."""
    response = httpx.post(
        f"{BASE_URL}/api/v1/auth/login",
        json={"email": email, "password": password},
        timeout=10.0,
    )
    if response.status_code != 200:
        print(f"ERROR: Login failed for {email}: {response.status_code}")
        print(response.text)
        sys.exit(1)

    body = response.json()
    return body["access_token"], body["user"]


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    response = httpx.request(
        method,
        f"{BASE_URL}{endpoint}",
        headers={"Authorization": f"Bearer {token}"},
        json=data if method != "GET" else None,
        timeout=10.0,
        follow_redirects=True,
    )
    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    if fields:
        filtered = {k: result["data"].get(k) for k in fields if k in result["data"]}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(result["data"], indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Complete rental flow")
    parser.add_argument("--product-id", required=True, help="Product UUID")
    parser.add_argument("--start", required=True, help="Rental start date (YYYY-MM-DD)")
    parser.add_argument("--end", required=True, help="Rental end date (YYYY-MM-DD)")
    parser.add_argument("--quantity", type=int, default=1, help="Units to rent")
    parser.add_argument("--cash", action="store_true", help="Pay cash at pickup instead of online")
    parser.add_argument("--skip-return", action="store_true", help="Skip pickup and return steps")
    args = parser.parse_args()

    rental = {
        "product_id": args.product_id,
        "start_date": args.start,
        "end_date": args.end,
        "quantity": args.quantity,
    }
    booking_fields = ["id", "booking_number", "status", "payment_status", "total_price", "amount_paid"]

    # Step 1: Login as customer
    print_step(1, "Login as customer")
    customer_token, customer = login(CUSTOMER_EMAIL, CUSTOMER_PASSWORD)
    print(f"Logged in as {CUSTOMER_EMAIL}")

    # Step 2: Calculate rental price
    print_step(2, "Calculate rental price")
    calc_result = api_request(customer_token, "POST", "/api/v1/bookings/calculate", rental)
    if not print_result(calc_result):
        sys.exit(1)

    if not calc_result["data"].get("available"):
        print(f"ERROR: Product not available - {calc_result['data'].get('unavailable_reason')}")
        sys.exit(1)

    breakdown = calc_result["data"]["price_breakdown"]
    print("\nPricing Summary:")
    print(f"  Base Price:  {breakdown['base_amount']} ({breakdown['days']} days)")
    print(f"  Discount:    {breakdown['discount_amount']} ({breakdown['discount_percent']}%)")
    print(f"  Tax:         {breakdown['tax_amount']} ({breakdown['tax_percent']}%)")
    print(f"  Total:       {breakdown['total_price']}")
    print(f"  Deposit:     {breakdown['security_deposit']}")

    # Step 3: Create booking
    print_step(3, "Create booking")
    booking_result = api_request(customer_token, "POST", "/api/v1/bookings/", {
        **rental,
        "customer": {
            "name": customer["name"],
            "email": customer["email"],
            "phone": customer.get("phone") or "+1 555 000 0000",
        },
    })
    if not print_result(booking_result, booking_fields):
        sys.exit(1)

    booking_id = booking_result["data"]["id"]
    booking_number = booking_result["data"]["booking_number"]
    print(f"\nBooking created: {booking_number}")

    # Step 4: Pay
    method = "cash" if args.cash else "online"
    print_step(4, f"Pay for booking ({method})")
    payment = {"method": method}
    if args.cash:
        payment["amount"] = breakdown["total_price"]
    payment_result = api_request(
        customer_token, "POST", f"/api/v1/bookings/{booking_id}/payment", payment
    )
    if not print_result(payment_result, booking_fields):
        sys.exit(1)

    if args.skip_return:
        print("\n" + "="*60)
        print("FLOW COMPLETE (skipped pickup and return)")
        print("="*60)
        return

    # Step 5: Login as staff
    print_step(5, "Login as staff")
    staff_token, _ = login(STAFF_EMAIL, STAFF_PASSWORD)
    print(f"Logged in as {STAFF_EMAIL}")

    # Step 6: Pickup
    print_step(6, "Mark booking as picked up")
    pickup_result = api_request(
        staff_token, "PUT", f"/api/v1/bookings/{booking_id}", {"status": "picked-up"}
    )
    if not print_result(pickup_result, ["id", "booking_number", "status", "picked_up_at"]):
        sys.exit(1)

    # Step 7: Return
    print_step(7, "Mark booking as returned")
    return_result = api_request(
        staff_token,
        "PUT",
        f"/api/v1/bookings/{booking_id}",
        {"status": "returned", "return_notes": "Returned in good condition"},
    )
    if not print_result(return_result, ["id", "booking_number", "status", "returned_at"]):
        sys.exit(1)

    # Final summary
    print("\n" + "="*60)
    print("FULL FLOW COMPLETE")
    print("="*60)
    print(f"Booking:    {booking_number}")
    print(f"Total Paid: {breakdown['total_price']}")


if __name__ == "__main__":
    main()
