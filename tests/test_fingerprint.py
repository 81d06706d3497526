from client.fingerprint import generate_fingerprint, new_session_id, rolling_hash
from client.signing import FingerprintSigner


def test_rolling_hash_known_values():
    assert rolling_hash("") == "0"
    assert rolling_hash("a") == "61"
    assert rolling_hash("ab") == "c21"


def test_rolling_hash_stays_within_32_bits():
    digest = rolling_hash("x" * 500)
    assert not digest.startswith("-")
    assert int(digest, 16) <= 0x80000000


def test_fingerprint_is_stable_for_same_environment():
    env = {"platform": "Linux", "language": "en_US", "cpu_count": 8}
    assert generate_fingerprint(env) == generate_fingerprint(dict(reversed(list(env.items()))))
    assert generate_fingerprint(env) != generate_fingerprint({**env, "cpu_count": 4})


def test_session_id_combines_fingerprint_and_time():
    assert new_session_id("abc123", now_ms=1700000000000) == "abc123_1700000000000"


def test_signer_generates_identity_when_not_given():
    signer = FingerprintSigner()
    assert signer.fingerprint
    assert signer.session_id.startswith(signer.fingerprint + "_")
