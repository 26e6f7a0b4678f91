"""
Tests for payload integrity checks.
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from algorithms.integrity import (
    PASS, FAIL, verify_roundtrip, sha256_hex, verify_size, looks_like_html,
)


def test_identical_buffers_pass():
    data = os.urandom(4096)
    assert verify_roundtrip(data, bytes(data)) == PASS


def test_one_byte_difference_fails():
    data = bytearray(os.urandom(4096))
    changed = bytearray(data)
    changed[2000] ^= 0x01
    assert verify_roundtrip(bytes(data), bytes(changed)) == FAIL


def test_length_difference_fails():
    data = os.urandom(4096)
    assert verify_roundtrip(data, data[:-1]) == FAIL
    assert verify_roundtrip(data, data + b"\x00") == FAIL


def test_hash_is_deterministic():
    data = os.urandom(1024)
    assert sha256_hex(data) == sha256_hex(data)
    assert sha256_hex(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_size_check():
    assert verify_size(2048, 2048) is True
    assert verify_size(2048, 2047) is False
    assert verify_size(0, 2048) is None


def test_html_detection():
    assert looks_like_html(b"<!DOCTYPE html><html><body>gateway</body></html>")
    assert looks_like_html(b"\n<html lang='en'>")
    assert not looks_like_html(b"\x00\x01binary payload\xff")
    assert not looks_like_html(b"")


def test_html_detection_only_sniffs_leading_bytes():
    assert not looks_like_html(b"a" * 1000 + b"<html>")
    assert looks_like_html(b"a" * 994 + b"<html>")
