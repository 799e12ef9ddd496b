from dataclasses import dataclass

from claimy.claimy_error import ValidationError


@dataclass(frozen=True)
class Respawn:
    code: str
    name: str
    tier: str


RESPAWNS: dict[str, Respawn] = {
    respawn.code: respawn
    for respawn in (
        Respawn("f4", "Cobra Castelo", "Tier 1"),
        Respawn("a1", "Dragão Vermelho", "Tier 2"),
        Respawn("b3", "Lich Supremo", "Tier 3"),
        Respawn("x7", "Demônio Ancião", "Tier 4"),
        Respawn("c2", "Orc Warlord", "Tier 1"),
        Respawn("d5", "Hydra Anciã", "Tier 2"),
        Respawn("e8", "Necromante Negro", "Tier 3"),
        Respawn("g1", "Titan de Ferro", "Tier 4"),
    )
}


def normalize_code(code: str) -> str:
    normalized = (code or "").strip().lower()
    if not normalized:
        raise ValidationError("A respawn code is required")
    return normalized


def get_respawn(code: str) -> Respawn:
    """Look up a respawn by code. Codes missing from the catalog still resolve, with a
    placeholder name and an unknown tier."""
    code = normalize_code(code)
    respawn = RESPAWNS.get(code)
    if respawn is None:
        respawn = Respawn(code, f"Respawn {code.upper()}", "Tier ?")
    return respawn
