"""
Unit tests for keystream packing, directional bursts and XOR application.
"""

import pytest
from a5vault.core_crypto.a51 import KeySetupVariant, generate, key_setup
from a5vault.core_crypto.keystream import (
    A51Cipher, BURST_BITS, BURST_BYTES, DirectionalKeystream,
    frame_keystream, pack_bits, packed_length, run_bursts, unpack_bits,
    xor_encrypt
)
from a5vault.core_crypto.vectors import (
    CANONICAL_VECTOR, KNOWN_ANSWERS, SHIFT_IN_VECTOR, check_vector,
    verify_known_answers
)


KEY = 0x911A2B3C4D5E6F0F
FRAME = 0x134


class TestPacking:
    """MSB-first bit packing."""

    def test_burst_constants(self):
        """114 bits need a 15-byte buffer."""
        assert BURST_BITS == 114
        assert BURST_BYTES == 15
        assert packed_length(0) == 0
        assert packed_length(8) == 1
        assert packed_length(9) == 2

    def test_msb_first(self):
        """Bit i goes to position 7 - (i % 8) of byte i // 8."""
        assert pack_bits([1]) == b"\x80"
        assert pack_bits([1, 0, 1]) == b"\xa0"
        assert pack_bits([0] * 7 + [1]) == b"\x01"
        assert pack_bits([1] * 9) == b"\xff\x80"

    def test_empty(self):
        """No bits pack to no bytes."""
        assert pack_bits([]) == b""

    def test_padded_buffer_is_zero_filled(self):
        """Unused bytes and positions stay zero."""
        assert pack_bits([1, 1], n_bytes=3) == b"\xc0\x00\x00"

    def test_buffer_too_small(self):
        """Bits that do not fit raise ValueError."""
        with pytest.raises(ValueError):
            pack_bits([1] * 17, n_bytes=2)

    def test_unpack(self):
        """unpack_bits() reads MSB first."""
        assert unpack_bits(b"\xa0", 3) == [1, 0, 1]
        assert unpack_bits(b"\x01") == [0, 0, 0, 0, 0, 0, 0, 1]
        with pytest.raises(ValueError):
            unpack_bits(b"\x00", 9)

    def test_unpack_reverses_pack(self):
        """Packing then unpacking keeps the keystream."""
        _, bits = generate(key_setup(KEY, FRAME), 114)
        assert unpack_bits(pack_bits(bits), 114) == bits


class TestBursts:
    """Two directional bursts from one key setup."""

    def test_buffer_sizes(self):
        """Each direction gets a 15-byte buffer."""
        _, keystream = run_bursts(key_setup(KEY, FRAME))
        assert len(keystream.a_to_b) == BURST_BYTES
        assert len(keystream.b_to_a) == BURST_BYTES

    def test_partial_last_byte(self):
        """Only the top two bits of byte 14 are used."""
        _, keystream = run_bursts(key_setup(KEY, FRAME))
        assert keystream.a_to_b[-1] & 0x3F == 0
        assert keystream.b_to_a[-1] & 0x3F == 0

    def test_directions_continue_one_stream(self):
        """B->A continues where A->B stopped."""
        state = key_setup(KEY, FRAME)
        end, bits = generate(state, 2 * BURST_BITS)
        final, keystream = run_bursts(state)
        assert keystream.a_to_b == pack_bits(bits[:BURST_BITS], BURST_BYTES)
        assert keystream.b_to_a == pack_bits(bits[BURST_BITS:], BURST_BYTES)
        assert final == end

    def test_first_byte_of_fixture(self):
        """The first six A->B bits are 001111."""
        keystream = frame_keystream(KEY, FRAME)
        assert keystream.a_to_b[0] & 0xFC == 0x3C

    def test_canonical_published_vector(self):
        """The canonical variant reproduces the published A5/1 vector."""
        keystream = frame_keystream(0x1223456789ABCDEF, 0x134, KeySetupVariant.CANONICAL)
        assert keystream.a_to_b.hex().upper() == "534EAA582FE8151AB6E1855A728C00"
        assert keystream.b_to_a.hex().upper() == "24FD35A35D5FB6526D32F906DF1AC0"

    def test_custom_burst_length(self):
        """Burst length is configurable."""
        _, keystream = run_bursts(key_setup(KEY, FRAME), burst_bits=6)
        assert keystream.a_to_b == b"\x3c"
        assert len(keystream.b_to_a) == 1

    def test_hex(self):
        """hex() returns both directions."""
        keystream = DirectionalKeystream(a_to_b=b"\x01", b_to_a=b"\xff")
        assert keystream.hex() == ("01", "ff")


class TestKnownAnswers:
    """Self-test vectors."""

    def test_all_vectors_pass(self):
        """Every known-answer vector passes."""
        results = verify_known_answers()
        assert set(results) == {v.name for v in KNOWN_ANSWERS}
        assert all(results.values())

    def test_individual_vectors(self):
        """check_vector() accepts both fixtures."""
        assert check_vector(SHIFT_IN_VECTOR)
        assert check_vector(CANONICAL_VECTOR)


class TestXorCipher:
    """XOR application of keystream."""

    def test_xor_symmetric(self):
        """XOR twice with the same keystream restores the data."""
        data = b"Test data"
        keystream = frame_keystream(KEY, FRAME).a_to_b
        assert xor_encrypt(xor_encrypt(data, keystream), keystream) == data

    def test_short_keystream_rejected(self):
        """Keystream shorter than the data raises ValueError."""
        with pytest.raises(ValueError):
            xor_encrypt(b"too long", b"\x00")

    def test_cipher_encrypt_decrypt(self):
        """Encryption followed by decryption recovers the plaintext."""
        cipher = A51Cipher(KEY, FRAME)
        plaintext = b"Hello, GSM!"
        ciphertext = cipher.encrypt(plaintext)
        assert ciphertext != plaintext

        cipher.reset()
        assert cipher.decrypt(ciphertext) == plaintext

    def test_different_frames_differ(self):
        """The canonical variant gives each frame its own keystream."""
        pt = b"same plaintext"
        c1 = A51Cipher(KEY, 1, KeySetupVariant.CANONICAL).encrypt(pt)
        c2 = A51Cipher(KEY, 2, KeySetupVariant.CANONICAL).encrypt(pt)
        assert c1 != c2

    def test_encrypt_stream_matches_encrypt(self):
        """Streaming encryption equals one-shot encryption."""
        data = b"streamed payload"
        assert bytes(A51Cipher(KEY, FRAME).encrypt_stream(data)) == A51Cipher(KEY, FRAME).encrypt(data)

    def test_reset_to_new_frame(self):
        """reset(frame=...) re-keys for another frame."""
        cipher = A51Cipher(KEY, 1, KeySetupVariant.CANONICAL)
        cipher.encrypt(b"xx")
        cipher.reset(frame=2)
        assert cipher.encrypt(b"abc") == A51Cipher(KEY, 2, KeySetupVariant.CANONICAL).encrypt(b"abc")
        assert cipher.generator.position == 24
