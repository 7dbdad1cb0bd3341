from payments.signing import parse_signature_header, sign_payload, verify_signature

SECRET = "whsec_unit"
PAYLOAD = b'{"id":"evt_1","type":"payment_intent.succeeded"}'


def test_signed_payload_verifies():
    header = sign_payload(PAYLOAD, SECRET, timestamp=1_700_000_000)
    assert header.startswith("t=1700000000,v1=")
    assert verify_signature(PAYLOAD, header, SECRET, now=1_700_000_010)


def test_tampered_payload_rejected():
    header = sign_payload(PAYLOAD, SECRET, timestamp=1_700_000_000)
    assert not verify_signature(PAYLOAD + b" ", header, SECRET, now=1_700_000_000)


def test_wrong_secret_rejected():
    header = sign_payload(PAYLOAD, "other", timestamp=1_700_000_000)
    assert not verify_signature(PAYLOAD, header, SECRET, now=1_700_000_000)


def test_stale_timestamp_rejected():
    header = sign_payload(PAYLOAD, SECRET, timestamp=1_700_000_000)
    assert not verify_signature(PAYLOAD, header, SECRET, tolerance=300, now=1_700_000_301)
    assert verify_signature(PAYLOAD, header, SECRET, tolerance=0, now=1_800_000_000)


def test_malformed_headers_rejected():
    for header in ("", "garbage", "t=abc,v1=00", "t=1700000000", "v1=deadbeef"):
        assert not verify_signature(PAYLOAD, header, SECRET, now=1_700_000_000)
    assert not verify_signature(PAYLOAD, sign_payload(PAYLOAD, SECRET), "")


def test_any_v1_signature_may_match():
    good = sign_payload(PAYLOAD, SECRET, timestamp=1_700_000_000).split("v1=")[1]
    header = f"t=1700000000,v1={'0' * 64},v1={good}"
    assert parse_signature_header(header) == (1_700_000_000, ["0" * 64, good])
    assert verify_signature(PAYLOAD, header, SECRET, now=1_700_000_000)
