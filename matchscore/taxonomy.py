"""
Skill Transferability Index.

Maps a canonical skill (lowercase) to the skills it can be substituted
by. The relationship is directional: an entry for "sccm" listing
"intune" lets an Intune candidate partially cover an SCCM requirement,
not the other way round.
"""

from typing import Dict, Iterable, Tuple

from .models import TaxonomyEntry
from .normalize import normalize_skill, normalize_skills


class SkillTransferabilityIndex:
    def __init__(self, entries: Iterable[TaxonomyEntry] = ()):
        index: Dict[str, Tuple[str, ...]] = {}
        for entry in entries:
            key = normalize_skill(entry.canonical_name)
            if not key:
                continue
            # First entry for a canonical name wins, as with a keyed lookup
            index.setdefault(key, tuple(normalize_skills(entry.transferability_from)))
        self._index = index

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, skill: str) -> bool:
        return normalize_skill(skill) in self._index

    def sources_for(self, skill: str) -> Tuple[str, ...]:
        """Skills that transfer into ``skill`` (empty when unknown)."""
        return self._index.get(normalize_skill(skill), ())

    def transfers(self, required_skill: str, candidate_skills: Iterable[str]) -> bool:
        """True when some candidate skill contains one of the source skills."""
        sources = self.sources_for(required_skill)
        if not sources:
            return False
        return any(src in cs for cs in candidate_skills for src in sources)
