"""Tests for the respawn catalog"""

import pytest

from claimy.claimy_error import ValidationError
from claimy.respawn import RESPAWNS, get_respawn, normalize_code


class TestRespawn:
    """Test cases for respawn lookup"""

    def test_catalog_lookup(self):
        respawn = get_respawn("f4")
        assert respawn.name == "Cobra Castelo"
        assert respawn.tier == "Tier 1"

    def test_codes_are_case_insensitive(self):
        assert get_respawn(" X7 ") == RESPAWNS["x7"]

    def test_unknown_code_resolves_to_placeholder(self):
        respawn = get_respawn("zz9")
        assert respawn.code == "zz9"
        assert respawn.name == "Respawn ZZ9"
        assert respawn.tier == "Tier ?"

    def test_blank_code_is_rejected(self):
        with pytest.raises(ValidationError):
            normalize_code("  ")
