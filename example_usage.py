#!/usr/bin/env python3
"""
Basic usage examples for OAuth Python client library.

This script demonstrates how to sign requests with OAuth 1.0a and how
to serialize requests through one client. Pass a base URL to also send
a signed request to a live server.
"""

import logging
import sys
import threading
import time

from oauth_client import (
    Credential,
    OAuthClient,
    OAuthClientError,
    RequestDescriptor,
    RequestKind,
    SignatureMethod,
    build_authorization_value
)


def main():
    """Run basic usage examples."""
    logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(message)s")

    server_url = sys.argv[1] if len(sys.argv) > 1 else None
    credential = Credential(
        consumer_key="dpf43f3p2l4k3l03",
        consumer_secret="kd94hf93k423kf44",
        token_key="nnch734d00sl2jdk",
        token_secret="pfkkdhi9sl3r4s00"
    )

    print("=== OAuth Python Client Basic Usage Examples ===\n")

    # Example 1: Sign a request directly
    print("1. Building an Authorization header...")
    request = RequestDescriptor(url="https://photos.example.net/photos", method="GET")
    header = build_authorization_value(
        credential, RequestKind.ACCESS_TOKEN, request,
        include_prefix=True, nonce="kllo9940pd9333jh", timestamp="1191242096"
    )
    print(f"   Authorization: {header}\n")

    # Example 2: Unsupported signature methods fail loudly
    print("2. Trying an unsupported signature method...")
    try:
        build_authorization_value(
            Credential("key", "secret", signature_method=SignatureMethod.RSA_SHA1),
            RequestKind.REQUEST_TOKEN,
            request
        )
    except OAuthClientError as e:
        print(f"   ✓ Rejected: {e}\n")

    # Example 3: Serialize two callers through one client
    print("3. Serializing callers through one client...")
    client = OAuthClient(server_url or "http://localhost:8080", credential)

    def worker(name):
        client.block_client(block_seconds=5, message=name)
        try:
            print(f"   {name} holds the client")
            time.sleep(0.2)
        finally:
            client.unblock_client(message=name)

    threads = [threading.Thread(target=worker, args=(f"worker-{i}",)) for i in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    print()

    # Example 4: Signed request to a live server
    if server_url:
        print("4. Sending a signed GET request...")
        try:
            response = client.get("/photos", params={"size": "original"})
            print(f"   Status: {response.status_code}")
            print(f"   Body: {response.as_json(default=response.text)}")
        except OAuthClientError as e:
            print(f"   ✗ Request failed: {e}")
            return 1

    client.close()
    print("=== Examples completed ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
