"""Tests for MacAddress parsing/rendering and address generation."""

from __future__ import annotations

import random

import pytest

from mac_rotator.adapters.generator import generate_distinct_mac, generate_mac
from mac_rotator.adapters.models import AdapterStatus, MacAddress
from mac_rotator.exceptions import MacGenerationError


class TestMacAddressParse:
    """Tests for MacAddress.parse and rendering."""

    @pytest.mark.parametrize(
        "text",
        ["02:1A:2B:3C:4D:5E", "02-1a-2b-3c-4d-5e", "021A2B3C4D5E", "  02:1a:2B:3c:4D:5e  "],
    )
    def test_accepts_common_forms(self, text: str) -> None:
        """Colon, dash and compact forms parse to the same address."""
        assert MacAddress.parse(text) == MacAddress(bytes.fromhex("021A2B3C4D5E"))

    @pytest.mark.parametrize("text", ["", "02:1A:2B:3C:4D", "02:1A-2B:3C:4D:5E", "GG:1A:2B:3C:4D:5E"])
    def test_rejects_malformed(self, text: str) -> None:
        """Malformed text raises ValueError."""
        with pytest.raises(ValueError):
            MacAddress.parse(text)

    def test_try_parse_returns_none_for_garbage(self) -> None:
        assert MacAddress.try_parse(None) is None
        assert MacAddress.try_parse("not-a-mac") is None

    def test_renderings(self) -> None:
        """str() is colon-separated upper case; compact is bare hex."""
        # Arrange
        mac = MacAddress.parse("02:1a:2b:3c:4d:5e")

        # Assert
        assert str(mac) == "02:1A:2B:3C:4D:5E"
        assert mac.compact == "021A2B3C4D5E"

    def test_wrong_length_rejected(self) -> None:
        with pytest.raises(ValueError, match="6 bytes"):
            MacAddress(b"\x02\x00")


class TestAdapterStatus:
    """Tests for platform status mapping."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Up", AdapterStatus.UP),
            ("Disabled", AdapterStatus.DISABLED),
            ("Disconnected", AdapterStatus.DOWN),
            ("Not Present", AdapterStatus.DOWN),
            (None, AdapterStatus.UNKNOWN),
        ],
    )
    def test_from_platform(self, value: str | None, expected: AdapterStatus) -> None:
        assert AdapterStatus.from_platform(value) is expected


class TestGenerateMac:
    """Tests for generate_mac."""

    def test_always_locally_administered_unicast(self) -> None:
        """Bit 1 of byte 0 is set and bit 0 is clear over many draws."""
        rng = random.Random(1234)

        for _ in range(10_000):
            mac = generate_mac(rng)
            assert mac.octets[0] & 0x02
            assert not mac.octets[0] & 0x01

    def test_default_source_is_policy_conformant(self) -> None:
        """The CSPRNG path applies the same byte-0 policy."""
        for _ in range(500):
            mac = generate_mac()
            assert mac.is_locally_administered
            assert mac.is_unicast

    def test_forces_bits_on_extreme_first_byte(self) -> None:
        """0xFF becomes 0xFE and 0x00 becomes 0x02."""

        class FixedRandom(random.Random):
            def __init__(self, value: int) -> None:
                super().__init__()
                self.value = value

            def randrange(self, *args: object, **kwargs: object) -> int:
                return self.value

        assert generate_mac(FixedRandom(0xFF)).octets[0] == 0xFE
        assert generate_mac(FixedRandom(0x00)).octets[0] == 0x02

    def test_seeded_rng_is_deterministic(self) -> None:
        assert generate_mac(random.Random(7)) == generate_mac(random.Random(7))


class TestGenerateDistinctMac:
    """Tests for the collision policy."""

    def test_differs_from_current(self) -> None:
        """A collision with the current address triggers a redraw."""
        # Arrange: the first draw of this seed is the "current" address
        current = generate_mac(random.Random(42))

        # Act
        mac = generate_distinct_mac(current, rng=random.Random(42))

        # Assert
        assert mac != current

    def test_exhausted_retries_raise(self) -> None:
        """A source that keeps producing the current address gives up."""

        class StuckRandom(random.Random):
            def randrange(self, *args: object, **kwargs: object) -> int:
                return 0

        current = MacAddress.parse("02:00:00:00:00:00")

        with pytest.raises(MacGenerationError, match="3 draws"):
            generate_distinct_mac(current, rng=StuckRandom(), max_retries=2)

    def test_none_current_skips_check(self) -> None:
        assert generate_distinct_mac(None, rng=random.Random(1)).is_locally_administered
