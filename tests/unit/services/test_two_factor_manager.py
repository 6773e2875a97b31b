import time

import pyotp

from src.app.services.hashing import hash_secret
from src.app.services.two_factor import generate_backup_codes, verify_totp


def test_begin_setup_builds_provisioning_qr(two_factor, make_user):
    user = make_user()

    secret, qr_code = two_factor.begin_setup(user)

    assert user.two_factor_secret == secret
    assert len(secret) == 32
    assert qr_code.startswith("data:image/png;base64,")


def test_totp_accepts_adjacent_steps():
    secret = pyotp.random_base32()
    totp = pyotp.TOTP(secret)
    now = time.time()
    assert verify_totp(secret, totp.at(now - 30))
    assert verify_totp(secret, totp.at(now + 30))
    assert not verify_totp(secret, totp.at(now - 300))
    assert not verify_totp(None, totp.at(now))


def test_backup_codes_are_unique_hex():
    codes = generate_backup_codes()

    assert len(codes) == 10
    assert len(set(codes)) == 10
    for code in codes:
        int(code, 16)


def test_backup_code_single_use(two_factor, make_user):
    user = make_user(backup_codes=[hash_secret("0A1B2C3D")])

    assert two_factor.verify(user, "0a1b2c3d")
    assert user.backup_codes == []
    assert not two_factor.verify(user, "0A1B2C3D")
